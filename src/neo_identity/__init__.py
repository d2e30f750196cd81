"""Neo-Identity - identity composition root and default identity services.

Registers password hashing, validation, user/role/sign-in management and
the identity cookie configuration into a service collection.
"""

# Initialize logging configuration on import
from .config.logging_config import setup_logging
setup_logging()

from .__version__ import __version__

from .config import ConfigurationSection, IdentitySettings, get_identity_settings

from .core.exceptions import (
    NeoIdentityError,
    ConfigurationError,
    ConfigBindingError,
    ServiceRegistrationError,
    StoreNotSupportedError,
    DataProtectionError,
    create_error_response,
)

from .dependency_injection import (
    ServiceCollection,
    ServiceDescriptor,
    ServiceDescriber,
    ServiceLifetime,
)

from .features.identity import (
    IdentityBuilder,
    IdentityOptions,
    IdentityAuthenticationTypes,
    CookieAuthenticationOptions,
    ExternalAuthenticationOptions,
    AuthenticationMode,
    compose_identity,
    add_identity,
    configure_identity,
)

from .features.identity.entities import IdentityUser, IdentityRole

__all__ = [
    "__version__",
    "ConfigurationSection",
    "IdentitySettings",
    "get_identity_settings",
    "NeoIdentityError",
    "ConfigurationError",
    "ConfigBindingError",
    "ServiceRegistrationError",
    "StoreNotSupportedError",
    "DataProtectionError",
    "create_error_response",
    "ServiceCollection",
    "ServiceDescriptor",
    "ServiceDescriber",
    "ServiceLifetime",
    "IdentityBuilder",
    "IdentityOptions",
    "IdentityAuthenticationTypes",
    "CookieAuthenticationOptions",
    "ExternalAuthenticationOptions",
    "AuthenticationMode",
    "compose_identity",
    "add_identity",
    "configure_identity",
    "IdentityUser",
    "IdentityRole",
]
