"""Default identity services."""

from .error_describer import IdentityErrorDescriber
from .lookup_normalizer import UpperInvariantLookupNormalizer
from .password_hasher import PasswordHasher
from .validators import UserValidator, PasswordValidator, RoleValidator
from .user_manager import UserManager
from .role_manager import RoleManager
from .claims_identity_factory import ClaimsIdentityFactory
from .sign_in_manager import SignInManager
from .security_stamp_validator import SecurityStampValidator

__all__ = [
    "IdentityErrorDescriber",
    "UpperInvariantLookupNormalizer",
    "PasswordHasher",
    "UserValidator",
    "PasswordValidator",
    "RoleValidator",
    "UserManager",
    "RoleManager",
    "ClaimsIdentityFactory",
    "SignInManager",
    "SecurityStampValidator",
]
