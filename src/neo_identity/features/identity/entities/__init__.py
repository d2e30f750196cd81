"""Identity entities, outcomes and protocol interfaces."""

from .user import IdentityUser, IdentityRole
from .claims import Claim, ClaimsIdentity, ClaimTypes
from .results import IdentityError, IdentityResult, PasswordVerificationResult, SignInResult
from .protocols import (
    TUser,
    TRole,
    UserValidatorProtocol,
    PasswordValidatorProtocol,
    PasswordHasherProtocol,
    LookupNormalizerProtocol,
    RoleValidatorProtocol,
    SecurityStampValidatorProtocol,
    ClaimsIdentityFactoryProtocol,
    AuthenticationManagerProtocol,
    UserStoreProtocol,
    UserPasswordStoreProtocol,
    UserSecurityStampStoreProtocol,
    UserEmailStoreProtocol,
    UserPhoneNumberStoreProtocol,
    UserRoleStoreProtocol,
    UserLockoutStoreProtocol,
    UserTwoFactorStoreProtocol,
    RoleStoreProtocol,
)

__all__ = [
    "IdentityUser",
    "IdentityRole",
    "Claim",
    "ClaimsIdentity",
    "ClaimTypes",
    "IdentityError",
    "IdentityResult",
    "PasswordVerificationResult",
    "SignInResult",
    "TUser",
    "TRole",
    "UserValidatorProtocol",
    "PasswordValidatorProtocol",
    "PasswordHasherProtocol",
    "LookupNormalizerProtocol",
    "RoleValidatorProtocol",
    "SecurityStampValidatorProtocol",
    "ClaimsIdentityFactoryProtocol",
    "AuthenticationManagerProtocol",
    "UserStoreProtocol",
    "UserPasswordStoreProtocol",
    "UserSecurityStampStoreProtocol",
    "UserEmailStoreProtocol",
    "UserPhoneNumberStoreProtocol",
    "UserRoleStoreProtocol",
    "UserLockoutStoreProtocol",
    "UserTwoFactorStoreProtocol",
    "RoleStoreProtocol",
]
