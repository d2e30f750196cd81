"""Default user, password and role validators.

Validators collect every failed rule instead of stopping at the first,
and report them as an IdentityResult.
"""

import re
from typing import Any, Generic, List, Optional

from ..entities.protocols import TRole, TUser
from ..entities.results import IdentityError, IdentityResult
from ..options import IdentityOptions
from .error_describer import IdentityErrorDescriber

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _result(errors: List[IdentityError]) -> IdentityResult:
    return IdentityResult.failed(*errors) if errors else IdentityResult.success()


class UserValidator(Generic[TUser]):
    """Checks user names and, optionally, email uniqueness."""

    def __init__(
        self,
        options: Optional[IdentityOptions] = None,
        describer: Optional[IdentityErrorDescriber] = None,
    ):
        self.options = options or IdentityOptions()
        self.describer = describer or IdentityErrorDescriber()

    async def validate(self, manager: Any, user: TUser) -> IdentityResult:
        errors: List[IdentityError] = []
        await self._validate_user_name(manager, user, errors)
        if self.options.user.require_unique_email:
            await self._validate_email(manager, user, errors)
        return _result(errors)

    async def _validate_user_name(self, manager: Any, user: TUser, errors: List[IdentityError]) -> None:
        user_name = await manager.get_user_name(user)
        if not user_name or not user_name.strip():
            errors.append(self.describer.invalid_user_name(user_name))
            return

        if self.options.user.allow_only_alphanumeric_user_names and not user_name.isalnum():
            errors.append(self.describer.invalid_user_name(user_name))
            return

        owner = await manager.find_by_name(user_name)
        if owner is not None and await manager.get_user_id(owner) != await manager.get_user_id(user):
            errors.append(self.describer.duplicate_user_name(user_name))

    async def _validate_email(self, manager: Any, user: TUser, errors: List[IdentityError]) -> None:
        email = await manager.get_email(user)
        if not email or not email.strip() or not EMAIL_PATTERN.match(email):
            errors.append(self.describer.invalid_email(email))
            return

        owner = await manager.find_by_email(email)
        if owner is not None and await manager.get_user_id(owner) != await manager.get_user_id(user):
            errors.append(self.describer.duplicate_email(email))


class PasswordValidator(Generic[TUser]):
    """Checks password length and character classes."""

    def __init__(
        self,
        options: Optional[IdentityOptions] = None,
        describer: Optional[IdentityErrorDescriber] = None,
    ):
        self.options = options or IdentityOptions()
        self.describer = describer or IdentityErrorDescriber()

    async def validate(self, manager: Any, user: Optional[TUser], password: str) -> IdentityResult:
        if password is None:
            raise ValueError("password is required")

        rules = self.options.password
        errors: List[IdentityError] = []

        if not password.strip() or len(password) < rules.required_length:
            errors.append(self.describer.password_too_short(rules.required_length))
        if rules.require_non_letter_or_digit and all(ch.isalnum() for ch in password):
            errors.append(self.describer.password_requires_non_letter_and_digit())
        if rules.require_digit and not any(ch.isdigit() for ch in password):
            errors.append(self.describer.password_requires_digit())
        if rules.require_lowercase and not any(ch.islower() for ch in password):
            errors.append(self.describer.password_requires_lower())
        if rules.require_uppercase and not any(ch.isupper() for ch in password):
            errors.append(self.describer.password_requires_upper())

        return _result(errors)


class RoleValidator(Generic[TRole]):
    """Checks that role names are present and unique."""

    def __init__(self, describer: Optional[IdentityErrorDescriber] = None):
        self.describer = describer or IdentityErrorDescriber()

    async def validate(self, manager: Any, role: TRole) -> IdentityResult:
        errors: List[IdentityError] = []
        role_name = await manager.get_role_name(role)

        if not role_name or not role_name.strip():
            errors.append(self.describer.invalid_role_name(role_name))
        else:
            owner = await manager.find_by_name(role_name)
            if owner is not None and await manager.get_role_id(owner) != await manager.get_role_id(role):
                errors.append(self.describer.duplicate_role_name(role_name))

        return _result(errors)
