"""Authentication records consumed by the external cookie middleware.

Defines the well-known cookie kinds, the option records registered for
each of them, and the context handed to the identity validation hook.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Awaitable, Callable, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from ...dependency_injection.protocols import ServiceProviderProtocol
from .entities.claims import ClaimsIdentity

COOKIE_PREFIX = ".Neo."


class IdentityAuthenticationTypes:
    """Authentication types, and option names, for the identity cookies."""
    APPLICATION_COOKIE_AUTHENTICATION_TYPE = "ApplicationCookie"
    EXTERNAL_COOKIE_AUTHENTICATION_TYPE = "ExternalCookie"
    TWO_FACTOR_REMEMBER_ME_COOKIE_AUTHENTICATION_TYPE = "TwoFactorRememberMeCookie"
    TWO_FACTOR_USER_ID_COOKIE_AUTHENTICATION_TYPE = "TwoFactorUserIdCookie"

    @classmethod
    def all(cls) -> Tuple[str, ...]:
        return (
            cls.APPLICATION_COOKIE_AUTHENTICATION_TYPE,
            cls.EXTERNAL_COOKIE_AUTHENTICATION_TYPE,
            cls.TWO_FACTOR_REMEMBER_ME_COOKIE_AUTHENTICATION_TYPE,
            cls.TWO_FACTOR_USER_ID_COOKIE_AUTHENTICATION_TYPE,
        )


class AuthenticationMode(str, Enum):
    """Whether middleware authenticates every request or only when asked."""
    ACTIVE = "active"
    PASSIVE = "passive"


@dataclass
class AuthenticationProperties:
    """Properties stored alongside an authentication ticket."""
    issued_utc: Optional[datetime] = None
    expires_utc: Optional[datetime] = None
    is_persistent: bool = False


@dataclass
class CookieValidateIdentityContext:
    """Context passed to ``on_validate_identity`` for each cookie request."""
    identity: Optional[ClaimsIdentity]
    services: ServiceProviderProtocol
    properties: AuthenticationProperties = field(default_factory=AuthenticationProperties)
    options: Optional["CookieAuthenticationOptions"] = None
    rejected: bool = False
    renewed: bool = False

    def reject_identity(self) -> None:
        self.identity = None
        self.rejected = True

    def replace_identity(self, identity: ClaimsIdentity) -> None:
        self.identity = identity
        self.renewed = True


class _AuthenticationOptionsModel(BaseModel):
    model_config = ConfigDict(validate_assignment=True, extra="ignore", arbitrary_types_allowed=True)


class CookieAuthenticationNotifications(_AuthenticationOptionsModel):
    """Callbacks invoked by the cookie middleware."""
    on_validate_identity: Optional[Callable[[CookieValidateIdentityContext], Awaitable[None]]] = None


class CookieAuthenticationOptions(_AuthenticationOptionsModel):
    """Settings for one cookie authentication middleware instance."""
    authentication_type: str = "Cookies"
    authentication_mode: AuthenticationMode = AuthenticationMode.ACTIVE
    cookie_name: Optional[str] = None
    cookie_path: str = "/"
    cookie_domain: Optional[str] = None
    cookie_http_only: bool = True
    expire_timespan: timedelta = timedelta(days=14)
    sliding_expiration: bool = True
    login_path: Optional[str] = None
    logout_path: Optional[str] = None
    return_url_parameter: str = "ReturnUrl"
    notifications: CookieAuthenticationNotifications = Field(default_factory=CookieAuthenticationNotifications)

    @property
    def effective_cookie_name(self) -> str:
        """Cookie name, derived from the authentication type when unset."""
        return self.cookie_name or f"{COOKIE_PREFIX}{self.authentication_type}"


class ExternalAuthenticationOptions(_AuthenticationOptionsModel):
    """Settings shared by external login providers."""
    sign_in_as_authentication_type: Optional[str] = None

