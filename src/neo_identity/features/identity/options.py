"""Identity options.

``IdentityOptions`` is generic over the user type, so ``IdentityOptions[AppUser]``
is a distinct options type with its own configure steps. Options are
pydantic models: configuration sections bind onto them with validation,
and assignments made by configure callbacks are validated too.
"""

from datetime import timedelta
from typing import Generic

from pydantic import BaseModel, ConfigDict, Field

from .entities.claims import ClaimTypes
from .entities.protocols import TUser


class _OptionsModel(BaseModel):
    model_config = ConfigDict(validate_assignment=True, extra="ignore")


class UserOptions(_OptionsModel):
    """Rules applied by the user validator."""
    allow_only_alphanumeric_user_names: bool = True
    require_unique_email: bool = False


class PasswordOptions(_OptionsModel):
    """Rules applied by the password validator."""
    required_length: int = Field(default=6, ge=0)
    require_non_letter_or_digit: bool = True
    require_digit: bool = True
    require_lowercase: bool = True
    require_uppercase: bool = True


class LockoutOptions(_OptionsModel):
    """Account lockout behaviour."""
    enabled_by_default: bool = False
    max_failed_access_attempts: int = Field(default=5, ge=1)
    default_lockout_timespan: timedelta = timedelta(minutes=5)


class SignInOptions(_OptionsModel):
    """Preconditions for signing in."""
    require_confirmed_email: bool = False
    require_confirmed_phone_number: bool = False


class ClaimsIdentityOptions(_OptionsModel):
    """Claim types used when issuing identities."""
    role_claim_type: str = ClaimTypes.ROLE
    user_name_claim_type: str = ClaimTypes.NAME
    user_id_claim_type: str = ClaimTypes.NAME_IDENTIFIER
    security_stamp_claim_type: str = ClaimTypes.SECURITY_STAMP


class IdentityOptions(_OptionsModel, Generic[TUser]):
    """All identity options for one user type."""
    user: UserOptions = Field(default_factory=UserOptions)
    password: PasswordOptions = Field(default_factory=PasswordOptions)
    lockout: LockoutOptions = Field(default_factory=LockoutOptions)
    sign_in: SignInOptions = Field(default_factory=SignInOptions)
    claims_identity: ClaimsIdentityOptions = Field(default_factory=ClaimsIdentityOptions)
    security_stamp_validation_interval: timedelta = timedelta(minutes=30)
