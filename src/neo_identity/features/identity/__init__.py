"""Identity feature: composition root, options, entities and default services."""

from .authentication import (
    AuthenticationMode,
    AuthenticationProperties,
    CookieAuthenticationNotifications,
    CookieAuthenticationOptions,
    CookieValidateIdentityContext,
    ExternalAuthenticationOptions,
    IdentityAuthenticationTypes,
)
from .builder import IdentityBuilder
from .options import (
    IdentityOptions,
    UserOptions,
    PasswordOptions,
    LockoutOptions,
    SignInOptions,
    ClaimsIdentityOptions,
)
from .registration import (
    IDENTITY_SECTION,
    compose_identity,
    add_identity,
    configure_identity,
)

__all__ = [
    "AuthenticationMode",
    "AuthenticationProperties",
    "CookieAuthenticationNotifications",
    "CookieAuthenticationOptions",
    "CookieValidateIdentityContext",
    "ExternalAuthenticationOptions",
    "IdentityAuthenticationTypes",
    "IdentityBuilder",
    "IdentityOptions",
    "UserOptions",
    "PasswordOptions",
    "LockoutOptions",
    "SignInOptions",
    "ClaimsIdentityOptions",
    "IDENTITY_SECTION",
    "compose_identity",
    "add_identity",
    "configure_identity",
]
