"""Claims identity factory."""

from typing import Generic, Optional

from ..entities.claims import Claim, ClaimsIdentity
from ..entities.protocols import TRole, TUser
from ..options import IdentityOptions
from .role_manager import RoleManager
from .user_manager import UserManager


class ClaimsIdentityFactory(Generic[TUser, TRole]):
    """Creates the identity issued at sign-in for a user.

    The identity carries the user id and name, the security stamp when the
    store keeps one, and one claim per role. User stores hold normalized
    role names, so each is mapped back to the role's display name through
    the role manager when the role still exists.
    """

    def __init__(
        self,
        user_manager: UserManager[TUser],
        role_manager: Optional[RoleManager[TRole]] = None,
        options: Optional[IdentityOptions] = None,
    ):
        if user_manager is None:
            raise ValueError("user_manager is required")
        self.user_manager = user_manager
        self.role_manager = role_manager
        self.options = options or user_manager.options

    async def create(self, user: TUser, authentication_type: str) -> ClaimsIdentity:
        if user is None:
            raise ValueError("user is required")

        claim_types = self.options.claims_identity
        identity = ClaimsIdentity(
            authentication_type=authentication_type,
            name_claim_type=claim_types.user_name_claim_type,
            role_claim_type=claim_types.role_claim_type,
        )

        identity.add_claim(Claim(claim_types.user_id_claim_type, await self.user_manager.get_user_id(user)))
        user_name = await self.user_manager.get_user_name(user)
        if user_name is not None:
            identity.add_claim(Claim(claim_types.user_name_claim_type, user_name))

        if self.user_manager.supports_user_security_stamp:
            stamp = await self.user_manager.get_security_stamp(user)
            if stamp is not None:
                identity.add_claim(Claim(claim_types.security_stamp_claim_type, stamp))

        if self.user_manager.supports_user_role:
            for role_name in await self.user_manager.get_roles(user):
                identity.add_claim(Claim(claim_types.role_claim_type, await self._display_name(role_name)))

        return identity

    async def _display_name(self, role_name: str) -> str:
        if self.role_manager is None:
            return role_name
        role = await self.role_manager.find_by_name(role_name)
        if role is None:
            return role_name
        return await self.role_manager.get_role_name(role) or role_name
