"""User manager - store-backed user operations."""

import logging
from datetime import datetime, timezone
from typing import Generic, List, Optional, Sequence
from uuid import uuid4

from ....core.exceptions import StoreNotSupportedError
from ..entities.protocols import (
    LookupNormalizerProtocol,
    PasswordHasherProtocol,
    PasswordValidatorProtocol,
    TUser,
    UserEmailStoreProtocol,
    UserLockoutStoreProtocol,
    UserPasswordStoreProtocol,
    UserPhoneNumberStoreProtocol,
    UserRoleStoreProtocol,
    UserSecurityStampStoreProtocol,
    UserStoreProtocol,
    UserTwoFactorStoreProtocol,
    UserValidatorProtocol,
)
from ..entities.results import IdentityError, IdentityResult, PasswordVerificationResult
from ..options import IdentityOptions
from .error_describer import IdentityErrorDescriber
from .lookup_normalizer import UpperInvariantLookupNormalizer
from .password_hasher import PasswordHasher

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_security_stamp() -> str:
    return str(uuid4())


class UserManager(Generic[TUser]):
    """Manages users through a user store.

    Optional store capabilities (passwords, emails, roles, lockout, ...)
    are detected at call time; calling an operation the store cannot
    support raises StoreNotSupportedError.
    """

    def __init__(
        self,
        store: UserStoreProtocol[TUser],
        options: Optional[IdentityOptions] = None,
        password_hasher: Optional[PasswordHasherProtocol[TUser]] = None,
        user_validators: Optional[Sequence[UserValidatorProtocol[TUser]]] = None,
        password_validators: Optional[Sequence[PasswordValidatorProtocol[TUser]]] = None,
        key_normalizer: Optional[LookupNormalizerProtocol] = None,
        error_describer: Optional[IdentityErrorDescriber] = None,
    ):
        if store is None:
            raise ValueError("store is required")
        self.store = store
        self.options = options or IdentityOptions()
        self.password_hasher = password_hasher or PasswordHasher()
        self.user_validators = list(user_validators or [])
        self.password_validators = list(password_validators or [])
        self.key_normalizer = key_normalizer or UpperInvariantLookupNormalizer()
        self.error_describer = error_describer or IdentityErrorDescriber()

    # Store capabilities

    @property
    def supports_user_password(self) -> bool:
        return isinstance(self.store, UserPasswordStoreProtocol)

    @property
    def supports_user_security_stamp(self) -> bool:
        return isinstance(self.store, UserSecurityStampStoreProtocol)

    @property
    def supports_user_email(self) -> bool:
        return isinstance(self.store, UserEmailStoreProtocol)

    @property
    def supports_user_phone_number(self) -> bool:
        return isinstance(self.store, UserPhoneNumberStoreProtocol)

    @property
    def supports_user_role(self) -> bool:
        return isinstance(self.store, UserRoleStoreProtocol)

    @property
    def supports_user_lockout(self) -> bool:
        return isinstance(self.store, UserLockoutStoreProtocol)

    @property
    def supports_user_two_factor(self) -> bool:
        return isinstance(self.store, UserTwoFactorStoreProtocol)

    def _require(self, supported: bool, capability: str):
        if not supported:
            raise StoreNotSupportedError(capability, store_type=type(self.store).__name__)
        return self.store

    # Lifecycle

    async def create(self, user: TUser, password: Optional[str] = None) -> IdentityResult:
        """Create a user, optionally hashing and storing an initial password."""
        if password is not None:
            self._require(self.supports_user_password, "UserPasswordStoreProtocol")
            result = await self._update_password_hash(user, password)
            if not result.succeeded:
                return result

        await self._update_security_stamp_internal(user)

        result = await self.validate_user(user)
        if not result.succeeded:
            return result

        if self.options.lockout.enabled_by_default and self.supports_user_lockout:
            await self.store.set_lockout_enabled(user, True)

        await self.update_normalized_user_name(user)
        await self.update_normalized_email(user)

        result = await self.store.create(user)
        if result.succeeded:
            logger.info(f"Created user {await self.get_user_id(user)}")
        return result

    async def update(self, user: TUser) -> IdentityResult:
        """Validate and persist changes to a user."""
        result = await self.validate_user(user)
        if not result.succeeded:
            return result

        await self.update_normalized_user_name(user)
        await self.update_normalized_email(user)
        return await self.store.update(user)

    async def delete(self, user: TUser) -> IdentityResult:
        result = await self.store.delete(user)
        if result.succeeded:
            logger.info(f"Deleted user {await self.get_user_id(user)}")
        return result

    # Lookup

    def normalize_key(self, key: Optional[str]) -> Optional[str]:
        return self.key_normalizer.normalize(key)

    async def find_by_id(self, user_id: str) -> Optional[TUser]:
        return await self.store.find_by_id(user_id)

    async def find_by_name(self, user_name: str) -> Optional[TUser]:
        if user_name is None:
            raise ValueError("user_name is required")
        return await self.store.find_by_name(self.normalize_key(user_name))

    async def find_by_email(self, email: str) -> Optional[TUser]:
        store = self._require(self.supports_user_email, "UserEmailStoreProtocol")
        if email is None:
            raise ValueError("email is required")
        return await store.find_by_email(self.normalize_key(email))

    async def get_user_id(self, user: TUser) -> str:
        return await self.store.get_user_id(user)

    async def get_user_name(self, user: TUser) -> Optional[str]:
        return await self.store.get_user_name(user)

    async def set_user_name(self, user: TUser, user_name: Optional[str]) -> IdentityResult:
        await self.store.set_user_name(user, user_name)
        await self._update_security_stamp_internal(user)
        return await self.update(user)

    async def update_normalized_user_name(self, user: TUser) -> None:
        normalized = self.normalize_key(await self.get_user_name(user))
        await self.store.set_normalized_user_name(user, normalized)

    # Validation

    async def validate_user(self, user: TUser) -> IdentityResult:
        errors: List[IdentityError] = []
        for validator in self.user_validators:
            result = await validator.validate(self, user)
            errors.extend(result.errors)

        if errors:
            logger.warning(
                f"User {await self.get_user_id(user)} validation failed: "
                + ", ".join(error.code for error in errors)
            )
            return IdentityResult.failed(*errors)
        return IdentityResult.success()

    async def validate_password(self, user: Optional[TUser], password: str) -> IdentityResult:
        errors: List[IdentityError] = []
        for validator in self.password_validators:
            result = await validator.validate(self, user, password)
            errors.extend(result.errors)

        if errors:
            logger.warning("Password validation failed: " + ", ".join(error.code for error in errors))
            return IdentityResult.failed(*errors)
        return IdentityResult.success()

    # Passwords

    async def has_password(self, user: TUser) -> bool:
        store = self._require(self.supports_user_password, "UserPasswordStoreProtocol")
        return await store.has_password(user)

    async def check_password(self, user: Optional[TUser], password: str) -> bool:
        """Verify a password, upgrading the stored hash when it is outdated."""
        if user is None:
            return False

        store = self._require(self.supports_user_password, "UserPasswordStoreProtocol")
        result = await self._verify_password(store, user, password)

        if result is PasswordVerificationResult.SUCCESS_REHASH_NEEDED:
            await self._update_password_hash(user, password, validate=False)
            await self.update(user)

        success = result is not PasswordVerificationResult.FAILED
        if not success:
            logger.warning(f"Invalid password for user {await self.get_user_id(user)}")
        return success

    async def add_password(self, user: TUser, password: str) -> IdentityResult:
        store = self._require(self.supports_user_password, "UserPasswordStoreProtocol")
        if await store.get_password_hash(user) is not None:
            return IdentityResult.failed(self.error_describer.user_already_has_password())

        result = await self._update_password_hash(user, password)
        if not result.succeeded:
            return result
        return await self.update(user)

    async def change_password(self, user: TUser, current_password: str, new_password: str) -> IdentityResult:
        store = self._require(self.supports_user_password, "UserPasswordStoreProtocol")
        if await self._verify_password(store, user, current_password) is PasswordVerificationResult.FAILED:
            logger.warning(f"Change password failed for user {await self.get_user_id(user)}")
            return IdentityResult.failed(self.error_describer.password_mismatch())

        result = await self._update_password_hash(user, new_password)
        if not result.succeeded:
            return result
        return await self.update(user)

    async def remove_password(self, user: TUser) -> IdentityResult:
        store = self._require(self.supports_user_password, "UserPasswordStoreProtocol")
        await store.set_password_hash(user, None)
        await self._update_security_stamp_internal(user)
        return await self.update(user)

    async def _verify_password(self, store, user: TUser, password: str) -> PasswordVerificationResult:
        hashed = await store.get_password_hash(user)
        if hashed is None:
            return PasswordVerificationResult.FAILED
        return self.password_hasher.verify_hashed_password(user, hashed, password)

    async def _update_password_hash(self, user: TUser, password: Optional[str], validate: bool = True) -> IdentityResult:
        store = self._require(self.supports_user_password, "UserPasswordStoreProtocol")
        if validate and password is not None:
            result = await self.validate_password(user, password)
            if not result.succeeded:
                return result

        hashed = self.password_hasher.hash_password(user, password) if password is not None else None
        await store.set_password_hash(user, hashed)
        await self._update_security_stamp_internal(user)
        return IdentityResult.success()

    # Security stamps

    async def get_security_stamp(self, user: TUser) -> Optional[str]:
        store = self._require(self.supports_user_security_stamp, "UserSecurityStampStoreProtocol")
        return await store.get_security_stamp(user)

    async def update_security_stamp(self, user: TUser) -> IdentityResult:
        """Issue a new stamp, invalidating identities built from the old one."""
        self._require(self.supports_user_security_stamp, "UserSecurityStampStoreProtocol")
        await self._update_security_stamp_internal(user)
        return await self.update(user)

    async def _update_security_stamp_internal(self, user: TUser) -> None:
        if self.supports_user_security_stamp:
            await self.store.set_security_stamp(user, new_security_stamp())

    # Email

    async def get_email(self, user: TUser) -> Optional[str]:
        store = self._require(self.supports_user_email, "UserEmailStoreProtocol")
        return await store.get_email(user)

    async def set_email(self, user: TUser, email: Optional[str]) -> IdentityResult:
        store = self._require(self.supports_user_email, "UserEmailStoreProtocol")
        await store.set_email(user, email)
        await store.set_email_confirmed(user, False)
        await self._update_security_stamp_internal(user)
        return await self.update(user)

    async def is_email_confirmed(self, user: TUser) -> bool:
        store = self._require(self.supports_user_email, "UserEmailStoreProtocol")
        return await store.get_email_confirmed(user)

    async def update_normalized_email(self, user: TUser) -> None:
        if self.supports_user_email:
            email = await self.store.get_email(user)
            await self.store.set_normalized_email(user, self.normalize_key(email))

    # Phone number

    async def is_phone_number_confirmed(self, user: TUser) -> bool:
        store = self._require(self.supports_user_phone_number, "UserPhoneNumberStoreProtocol")
        return await store.get_phone_number_confirmed(user)

    # Roles

    async def add_to_role(self, user: TUser, role: str) -> IdentityResult:
        store = self._require(self.supports_user_role, "UserRoleStoreProtocol")
        normalized_role = self.normalize_key(role)
        if await store.is_in_role(user, normalized_role):
            return IdentityResult.failed(self.error_describer.user_already_in_role(role))

        await store.add_to_role(user, normalized_role)
        return await self.update(user)

    async def remove_from_role(self, user: TUser, role: str) -> IdentityResult:
        store = self._require(self.supports_user_role, "UserRoleStoreProtocol")
        normalized_role = self.normalize_key(role)
        if not await store.is_in_role(user, normalized_role):
            return IdentityResult.failed(self.error_describer.user_not_in_role(role))

        await store.remove_from_role(user, normalized_role)
        return await self.update(user)

    async def get_roles(self, user: TUser) -> List[str]:
        store = self._require(self.supports_user_role, "UserRoleStoreProtocol")
        return await store.get_roles(user)

    async def is_in_role(self, user: TUser, role: str) -> bool:
        store = self._require(self.supports_user_role, "UserRoleStoreProtocol")
        return await store.is_in_role(user, self.normalize_key(role))

    # Lockout

    async def is_locked_out(self, user: TUser) -> bool:
        store = self._require(self.supports_user_lockout, "UserLockoutStoreProtocol")
        if not await store.get_lockout_enabled(user):
            return False
        lockout_end = await store.get_lockout_end_date(user)
        return lockout_end is not None and lockout_end >= utcnow()

    async def get_lockout_enabled(self, user: TUser) -> bool:
        store = self._require(self.supports_user_lockout, "UserLockoutStoreProtocol")
        return await store.get_lockout_enabled(user)

    async def set_lockout_enabled(self, user: TUser, enabled: bool) -> IdentityResult:
        store = self._require(self.supports_user_lockout, "UserLockoutStoreProtocol")
        await store.set_lockout_enabled(user, enabled)
        return await self.update(user)

    async def get_lockout_end_date(self, user: TUser) -> Optional[datetime]:
        store = self._require(self.supports_user_lockout, "UserLockoutStoreProtocol")
        return await store.get_lockout_end_date(user)

    async def set_lockout_end_date(self, user: TUser, lockout_end: Optional[datetime]) -> IdentityResult:
        store = self._require(self.supports_user_lockout, "UserLockoutStoreProtocol")
        if not await store.get_lockout_enabled(user):
            return IdentityResult.failed(self.error_describer.user_lockout_not_enabled())

        await store.set_lockout_end_date(user, lockout_end)
        return await self.update(user)

    async def access_failed(self, user: TUser) -> IdentityResult:
        """Record a failed access; lock the user out once the limit is reached."""
        store = self._require(self.supports_user_lockout, "UserLockoutStoreProtocol")
        count = await store.increment_access_failed_count(user)
        if count < self.options.lockout.max_failed_access_attempts:
            return await self.update(user)

        logger.warning(f"User {await self.get_user_id(user)} is locked out")
        await store.set_lockout_end_date(user, utcnow() + self.options.lockout.default_lockout_timespan)
        await store.reset_access_failed_count(user)
        return await self.update(user)

    async def reset_access_failed_count(self, user: TUser) -> IdentityResult:
        store = self._require(self.supports_user_lockout, "UserLockoutStoreProtocol")
        if await store.get_access_failed_count(user) == 0:
            return IdentityResult.success()

        await store.reset_access_failed_count(user)
        return await self.update(user)

    async def get_access_failed_count(self, user: TUser) -> int:
        store = self._require(self.supports_user_lockout, "UserLockoutStoreProtocol")
        return await store.get_access_failed_count(user)

    # Two-factor

    async def get_two_factor_enabled(self, user: TUser) -> bool:
        store = self._require(self.supports_user_two_factor, "UserTwoFactorStoreProtocol")
        return await store.get_two_factor_enabled(user)

    async def set_two_factor_enabled(self, user: TUser, enabled: bool) -> IdentityResult:
        store = self._require(self.supports_user_two_factor, "UserTwoFactorStoreProtocol")
        await store.set_two_factor_enabled(user, enabled)
        await self._update_security_stamp_internal(user)
        return await self.update(user)
