"""Sign-in manager - cookie sign-in flows on top of the user manager."""

import logging
from typing import Generic, Optional

from ..authentication import IdentityAuthenticationTypes
from ..entities.claims import Claim, ClaimsIdentity, ClaimTypes
from ..entities.protocols import AuthenticationManagerProtocol, ClaimsIdentityFactoryProtocol, TUser
from ..entities.results import SignInResult
from ..options import IdentityOptions
from .user_manager import UserManager

logger = logging.getLogger(__name__)


class SignInManager(Generic[TUser]):
    """Signs users in and out of the identity cookies."""

    def __init__(
        self,
        user_manager: UserManager[TUser],
        authentication_manager: AuthenticationManagerProtocol,
        claims_factory: ClaimsIdentityFactoryProtocol[TUser],
        options: Optional[IdentityOptions] = None,
    ):
        if user_manager is None:
            raise ValueError("user_manager is required")
        if authentication_manager is None:
            raise ValueError("authentication_manager is required")
        if claims_factory is None:
            raise ValueError("claims_factory is required")
        self.user_manager = user_manager
        self.authentication_manager = authentication_manager
        self.claims_factory = claims_factory
        self.options = options or user_manager.options

    async def create_user_identity(self, user: TUser) -> ClaimsIdentity:
        return await self.claims_factory.create(
            user, IdentityAuthenticationTypes.APPLICATION_COOKIE_AUTHENTICATION_TYPE
        )

    async def can_sign_in(self, user: TUser) -> bool:
        """Check the confirmation requirements from SignInOptions."""
        sign_in = self.options.sign_in
        if sign_in.require_confirmed_email and not await self.user_manager.is_email_confirmed(user):
            return False
        if sign_in.require_confirmed_phone_number and not await self.user_manager.is_phone_number_confirmed(user):
            return False
        return True

    async def sign_in(self, user: TUser, is_persistent: bool, authentication_method: Optional[str] = None) -> None:
        identity = await self.create_user_identity(user)
        if authentication_method:
            identity.add_claim(Claim(ClaimTypes.AUTHENTICATION_METHOD, authentication_method))

        await self.authentication_manager.sign_in(
            IdentityAuthenticationTypes.APPLICATION_COOKIE_AUTHENTICATION_TYPE,
            identity,
            is_persistent,
        )
        logger.info(f"User {await self.user_manager.get_user_id(user)} signed in")

    async def sign_out(self) -> None:
        await self.authentication_manager.sign_out(
            IdentityAuthenticationTypes.APPLICATION_COOKIE_AUTHENTICATION_TYPE,
            IdentityAuthenticationTypes.EXTERNAL_COOKIE_AUTHENTICATION_TYPE,
            IdentityAuthenticationTypes.TWO_FACTOR_USER_ID_COOKIE_AUTHENTICATION_TYPE,
        )

    async def validate_security_stamp(self, identity: ClaimsIdentity, user_id: Optional[str]) -> Optional[TUser]:
        """Return the user when the identity's stamp still matches the store."""
        if not user_id:
            return None

        user = await self.user_manager.find_by_id(user_id)
        if user is None:
            return None
        if not self.user_manager.supports_user_security_stamp:
            return user

        stamp = identity.find_first_value(self.options.claims_identity.security_stamp_claim_type)
        if stamp == await self.user_manager.get_security_stamp(user):
            return user

        logger.info(f"Security stamp mismatch for user {user_id}")
        return None

    async def password_sign_in(
        self,
        user_name: str,
        password: str,
        is_persistent: bool,
        should_lockout: bool = False,
    ) -> SignInResult:
        user = await self.user_manager.find_by_name(user_name)
        if user is None:
            logger.warning(f"Sign-in failed: unknown user {user_name}")
            return SignInResult.failed()

        error = await self._pre_sign_in_check(user)
        if error is not None:
            return error

        if await self.user_manager.check_password(user, password):
            if self.user_manager.supports_user_lockout:
                await self.user_manager.reset_access_failed_count(user)
            return await self._sign_in_or_two_factor(user, is_persistent)

        if should_lockout and self.user_manager.supports_user_lockout:
            await self.user_manager.access_failed(user)
            if await self.user_manager.is_locked_out(user):
                return SignInResult.locked_out()

        return SignInResult.failed()

    async def _pre_sign_in_check(self, user: TUser) -> Optional[SignInResult]:
        if not await self.can_sign_in(user):
            logger.warning(f"User {await self.user_manager.get_user_id(user)} is not allowed to sign in")
            return SignInResult.not_allowed()
        if self.user_manager.supports_user_lockout and await self.user_manager.is_locked_out(user):
            logger.warning(f"User {await self.user_manager.get_user_id(user)} is locked out")
            return SignInResult.locked_out()
        return None

    async def _sign_in_or_two_factor(self, user: TUser, is_persistent: bool) -> SignInResult:
        if (
            self.user_manager.supports_user_two_factor
            and await self.user_manager.get_two_factor_enabled(user)
            and not await self.is_two_factor_client_remembered(user)
        ):
            # Park the user id until the second factor is verified
            user_id = await self.user_manager.get_user_id(user)
            identity = ClaimsIdentity(
                authentication_type=IdentityAuthenticationTypes.TWO_FACTOR_USER_ID_COOKIE_AUTHENTICATION_TYPE,
                claims=[Claim(ClaimTypes.NAME, user_id)],
            )
            await self.authentication_manager.sign_in(
                IdentityAuthenticationTypes.TWO_FACTOR_USER_ID_COOKIE_AUTHENTICATION_TYPE, identity
            )
            return SignInResult.two_factor_required()

        await self.sign_in(user, is_persistent)
        return SignInResult.success()

    # Two-factor client memory

    async def is_two_factor_client_remembered(self, user: TUser) -> bool:
        identity = await self.authentication_manager.authenticate(
            IdentityAuthenticationTypes.TWO_FACTOR_REMEMBER_ME_COOKIE_AUTHENTICATION_TYPE
        )
        if identity is None:
            return False
        return identity.name == await self.user_manager.get_user_id(user)

    async def remember_two_factor_client(self, user: TUser) -> None:
        user_id = await self.user_manager.get_user_id(user)
        identity = ClaimsIdentity(
            authentication_type=IdentityAuthenticationTypes.TWO_FACTOR_REMEMBER_ME_COOKIE_AUTHENTICATION_TYPE,
            claims=[Claim(ClaimTypes.NAME, user_id)],
        )
        await self.authentication_manager.sign_in(
            IdentityAuthenticationTypes.TWO_FACTOR_REMEMBER_ME_COOKIE_AUTHENTICATION_TYPE,
            identity,
            True,
        )

    async def forget_two_factor_client(self) -> None:
        await self.authentication_manager.sign_out(
            IdentityAuthenticationTypes.TWO_FACTOR_REMEMBER_ME_COOKIE_AUTHENTICATION_TYPE
        )

    async def get_two_factor_authentication_user(self) -> Optional[TUser]:
        """User parked in the two-factor cookie by a password sign-in."""
        identity = await self.authentication_manager.authenticate(
            IdentityAuthenticationTypes.TWO_FACTOR_USER_ID_COOKIE_AUTHENTICATION_TYPE
        )
        if identity is None or not identity.name:
            return None
        return await self.user_manager.find_by_id(identity.name)
