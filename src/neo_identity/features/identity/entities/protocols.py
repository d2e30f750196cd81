"""Protocol interfaces for the identity feature.

Capability protocols are generic over the user or role type so that a
parameterised protocol, e.g. ``UserValidatorProtocol[AppUser]``, can serve
as the capability identifier in a service collection. Store protocols are
split by optional capability; managers detect support with ``isinstance``.
"""

from abc import abstractmethod
from datetime import datetime
from typing import TYPE_CHECKING, Any, List, Optional, Protocol, TypeVar, runtime_checkable

from .claims import ClaimsIdentity
from .results import IdentityResult, PasswordVerificationResult

if TYPE_CHECKING:
    from ..authentication import CookieValidateIdentityContext

TUser = TypeVar("TUser")
TRole = TypeVar("TRole")


# Capability protocols

@runtime_checkable
class UserValidatorProtocol(Protocol[TUser]):
    """Validates a user before it is created or updated."""

    @abstractmethod
    async def validate(self, manager: Any, user: TUser) -> IdentityResult:
        ...


@runtime_checkable
class PasswordValidatorProtocol(Protocol[TUser]):
    """Validates a candidate password."""

    @abstractmethod
    async def validate(self, manager: Any, user: Optional[TUser], password: str) -> IdentityResult:
        ...


@runtime_checkable
class PasswordHasherProtocol(Protocol[TUser]):
    """Hashes passwords and verifies them against stored hashes."""

    @abstractmethod
    def hash_password(self, user: Optional[TUser], password: str) -> str:
        ...

    @abstractmethod
    def verify_hashed_password(
        self, user: Optional[TUser], hashed_password: str, provided_password: str
    ) -> PasswordVerificationResult:
        ...


@runtime_checkable
class LookupNormalizerProtocol(Protocol):
    """Normalizes user names, emails and role names for lookups."""

    @abstractmethod
    def normalize(self, key: Optional[str]) -> Optional[str]:
        ...


@runtime_checkable
class RoleValidatorProtocol(Protocol[TRole]):
    """Validates a role before it is created or updated."""

    @abstractmethod
    async def validate(self, manager: Any, role: TRole) -> IdentityResult:
        ...


@runtime_checkable
class SecurityStampValidatorProtocol(Protocol):
    """Revalidates a cookie identity against the user's security stamp."""

    @abstractmethod
    async def validate(self, context: "CookieValidateIdentityContext") -> None:
        ...


@runtime_checkable
class ClaimsIdentityFactoryProtocol(Protocol[TUser]):
    """Creates the claims identity issued for a user."""

    @abstractmethod
    async def create(self, user: TUser, authentication_type: str) -> ClaimsIdentity:
        ...


@runtime_checkable
class AuthenticationManagerProtocol(Protocol):
    """Cookie sign-in surface of the hosting HTTP pipeline."""

    @abstractmethod
    async def sign_in(self, authentication_type: str, identity: ClaimsIdentity, is_persistent: bool = False) -> None:
        ...

    @abstractmethod
    async def sign_out(self, *authentication_types: str) -> None:
        ...

    @abstractmethod
    async def authenticate(self, authentication_type: str) -> Optional[ClaimsIdentity]:
        ...


# User store protocols

@runtime_checkable
class UserStoreProtocol(Protocol[TUser]):
    """Persistence for users."""

    @abstractmethod
    async def get_user_id(self, user: TUser) -> str:
        ...

    @abstractmethod
    async def get_user_name(self, user: TUser) -> Optional[str]:
        ...

    @abstractmethod
    async def set_user_name(self, user: TUser, user_name: Optional[str]) -> None:
        ...

    @abstractmethod
    async def get_normalized_user_name(self, user: TUser) -> Optional[str]:
        ...

    @abstractmethod
    async def set_normalized_user_name(self, user: TUser, normalized_name: Optional[str]) -> None:
        ...

    @abstractmethod
    async def create(self, user: TUser) -> IdentityResult:
        ...

    @abstractmethod
    async def update(self, user: TUser) -> IdentityResult:
        ...

    @abstractmethod
    async def delete(self, user: TUser) -> IdentityResult:
        ...

    @abstractmethod
    async def find_by_id(self, user_id: str) -> Optional[TUser]:
        ...

    @abstractmethod
    async def find_by_name(self, normalized_user_name: str) -> Optional[TUser]:
        ...


@runtime_checkable
class UserPasswordStoreProtocol(Protocol[TUser]):
    """Stores password hashes."""

    @abstractmethod
    async def set_password_hash(self, user: TUser, password_hash: Optional[str]) -> None:
        ...

    @abstractmethod
    async def get_password_hash(self, user: TUser) -> Optional[str]:
        ...

    @abstractmethod
    async def has_password(self, user: TUser) -> bool:
        ...


@runtime_checkable
class UserSecurityStampStoreProtocol(Protocol[TUser]):
    """Stores security stamps."""

    @abstractmethod
    async def set_security_stamp(self, user: TUser, stamp: str) -> None:
        ...

    @abstractmethod
    async def get_security_stamp(self, user: TUser) -> Optional[str]:
        ...


@runtime_checkable
class UserEmailStoreProtocol(Protocol[TUser]):
    """Stores emails and their confirmation flag."""

    @abstractmethod
    async def set_email(self, user: TUser, email: Optional[str]) -> None:
        ...

    @abstractmethod
    async def get_email(self, user: TUser) -> Optional[str]:
        ...

    @abstractmethod
    async def get_normalized_email(self, user: TUser) -> Optional[str]:
        ...

    @abstractmethod
    async def set_normalized_email(self, user: TUser, normalized_email: Optional[str]) -> None:
        ...

    @abstractmethod
    async def get_email_confirmed(self, user: TUser) -> bool:
        ...

    @abstractmethod
    async def set_email_confirmed(self, user: TUser, confirmed: bool) -> None:
        ...

    @abstractmethod
    async def find_by_email(self, normalized_email: str) -> Optional[TUser]:
        ...


@runtime_checkable
class UserPhoneNumberStoreProtocol(Protocol[TUser]):
    """Stores phone numbers and their confirmation flag."""

    @abstractmethod
    async def get_phone_number(self, user: TUser) -> Optional[str]:
        ...

    @abstractmethod
    async def set_phone_number(self, user: TUser, phone_number: Optional[str]) -> None:
        ...

    @abstractmethod
    async def get_phone_number_confirmed(self, user: TUser) -> bool:
        ...

    @abstractmethod
    async def set_phone_number_confirmed(self, user: TUser, confirmed: bool) -> None:
        ...


@runtime_checkable
class UserRoleStoreProtocol(Protocol[TUser]):
    """Stores role membership by normalized role name."""

    @abstractmethod
    async def add_to_role(self, user: TUser, normalized_role_name: str) -> None:
        ...

    @abstractmethod
    async def remove_from_role(self, user: TUser, normalized_role_name: str) -> None:
        ...

    @abstractmethod
    async def get_roles(self, user: TUser) -> List[str]:
        ...

    @abstractmethod
    async def is_in_role(self, user: TUser, normalized_role_name: str) -> bool:
        ...


@runtime_checkable
class UserLockoutStoreProtocol(Protocol[TUser]):
    """Stores lockout state and failed access counts."""

    @abstractmethod
    async def get_lockout_end_date(self, user: TUser) -> Optional[datetime]:
        ...

    @abstractmethod
    async def set_lockout_end_date(self, user: TUser, lockout_end: Optional[datetime]) -> None:
        ...

    @abstractmethod
    async def increment_access_failed_count(self, user: TUser) -> int:
        ...

    @abstractmethod
    async def reset_access_failed_count(self, user: TUser) -> None:
        ...

    @abstractmethod
    async def get_access_failed_count(self, user: TUser) -> int:
        ...

    @abstractmethod
    async def get_lockout_enabled(self, user: TUser) -> bool:
        ...

    @abstractmethod
    async def set_lockout_enabled(self, user: TUser, enabled: bool) -> None:
        ...


@runtime_checkable
class UserTwoFactorStoreProtocol(Protocol[TUser]):
    """Stores whether two-factor authentication is enabled."""

    @abstractmethod
    async def set_two_factor_enabled(self, user: TUser, enabled: bool) -> None:
        ...

    @abstractmethod
    async def get_two_factor_enabled(self, user: TUser) -> bool:
        ...


# Role store protocol

@runtime_checkable
class RoleStoreProtocol(Protocol[TRole]):
    """Persistence for roles."""

    @abstractmethod
    async def create(self, role: TRole) -> IdentityResult:
        ...

    @abstractmethod
    async def update(self, role: TRole) -> IdentityResult:
        ...

    @abstractmethod
    async def delete(self, role: TRole) -> IdentityResult:
        ...

    @abstractmethod
    async def get_role_id(self, role: TRole) -> str:
        ...

    @abstractmethod
    async def get_role_name(self, role: TRole) -> Optional[str]:
        ...

    @abstractmethod
    async def set_role_name(self, role: TRole, role_name: Optional[str]) -> None:
        ...

    @abstractmethod
    async def get_normalized_role_name(self, role: TRole) -> Optional[str]:
        ...

    @abstractmethod
    async def set_normalized_role_name(self, role: TRole, normalized_name: Optional[str]) -> None:
        ...

    @abstractmethod
    async def find_by_id(self, role_id: str) -> Optional[TRole]:
        ...

    @abstractmethod
    async def find_by_name(self, normalized_role_name: str) -> Optional[TRole]:
        ...
