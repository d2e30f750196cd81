"""Identity composition root.

Registers the default identity services with first-wins ``try_add``
semantics and the configure steps for the external authentication
options and the four identity cookies.

Callers that want to replace a default must register it before composing,
or register it through the returned ``IdentityBuilder``. Option values can
be overridden by any configure step registered later.
"""

import logging
from datetime import timedelta
from typing import Any, Callable, Optional

from ...config.source import ConfigurationSection
from ...dependency_injection import ServiceCollection, ServiceDescriber
from .authentication import (
    AuthenticationMode,
    CookieAuthenticationNotifications,
    CookieAuthenticationOptions,
    ExternalAuthenticationOptions,
    IdentityAuthenticationTypes,
)
from .builder import IdentityBuilder
from .entities.protocols import (
    ClaimsIdentityFactoryProtocol,
    LookupNormalizerProtocol,
    PasswordHasherProtocol,
    PasswordValidatorProtocol,
    RoleValidatorProtocol,
    SecurityStampValidatorProtocol,
    UserValidatorProtocol,
)
from .entities.user import IdentityRole, IdentityUser
from .options import IdentityOptions
from .services import (
    ClaimsIdentityFactory,
    IdentityErrorDescriber,
    PasswordHasher,
    PasswordValidator,
    RoleManager,
    RoleValidator,
    SecurityStampValidator,
    SignInManager,
    UpperInvariantLookupNormalizer,
    UserManager,
    UserValidator,
)

logger = logging.getLogger(__name__)

IDENTITY_SECTION = "identity"
LOGIN_PATH = "/Account/Login"
SHORT_LIVED_COOKIE_EXPIRATION = timedelta(minutes=5)


def configure_identity(
    services: ServiceCollection,
    user_type: Any,
    configure: Callable[[IdentityOptions], Any],
) -> ServiceCollection:
    """Append a configure step for the identity options of ``user_type``."""
    return services.configure(IdentityOptions[user_type], configure)


def compose_identity(
    services: ServiceCollection,
    user_type: Any,
    role_type: Any,
    identity_config: Optional[ConfigurationSection] = None,
    configure_options: Optional[Callable[[IdentityOptions], Any]] = None,
    use_default_sub_key: bool = True,
) -> IdentityBuilder:
    """Register identity services for a user and role type.

    Data protection is not registered here; opt in with
    ``IdentityBuilder.add_data_protection``.

    Args:
        services: Registry to register into
        user_type: User entity type
        role_type: Role entity type
        identity_config: Optional configuration bound onto the identity options
        configure_options: Optional callback applied after the configuration binding
        use_default_sub_key: Narrow ``identity_config`` to its ``identity`` section first

    Returns:
        Builder for further registrations

    Raises:
        ConfigBindingError: When the configuration does not fit IdentityOptions
    """
    options_type = IdentityOptions[user_type]

    if identity_config is not None:
        if use_default_sub_key:
            identity_config = identity_config.get_section(IDENTITY_SECTION)
        # Bind once now so a bad shape fails start-up instead of first use
        identity_config.bind(options_type)
        services.configure(options_type, identity_config.binder(options_type))

    describe = ServiceDescriber(identity_config)

    services.try_add(describe.transient(UserValidatorProtocol[user_type], UserValidator[user_type]))
    services.try_add(describe.transient(PasswordValidatorProtocol[user_type], PasswordValidator[user_type]))
    services.try_add(describe.transient(PasswordHasherProtocol[user_type], PasswordHasher[user_type]))
    services.try_add(describe.transient(LookupNormalizerProtocol, UpperInvariantLookupNormalizer))
    services.try_add(describe.transient(RoleValidatorProtocol[role_type], RoleValidator[role_type]))
    # The describer has no protocol so errors can be added without breaking implementers
    services.try_add(describe.transient(IdentityErrorDescriber, IdentityErrorDescriber))
    services.try_add(describe.scoped(SecurityStampValidatorProtocol, SecurityStampValidator[user_type]))
    services.try_add(
        describe.scoped(ClaimsIdentityFactoryProtocol[user_type], ClaimsIdentityFactory[user_type, role_type])
    )
    services.try_add(describe.scoped(UserManager[user_type], UserManager[user_type]))
    services.try_add(describe.scoped(SignInManager[user_type], SignInManager[user_type]))
    services.try_add(describe.scoped(RoleManager[role_type], RoleManager[role_type]))

    if configure_options is not None:
        configure_identity(services, user_type, configure_options)

    def configure_external(options: ExternalAuthenticationOptions) -> None:
        options.sign_in_as_authentication_type = IdentityAuthenticationTypes.EXTERNAL_COOKIE_AUTHENTICATION_TYPE

    services.configure(ExternalAuthenticationOptions, configure_external)

    def configure_application_cookie(options: CookieAuthenticationOptions) -> None:
        options.authentication_type = IdentityAuthenticationTypes.APPLICATION_COOKIE_AUTHENTICATION_TYPE
        options.login_path = LOGIN_PATH
        options.notifications = CookieAuthenticationNotifications(
            on_validate_identity=SecurityStampValidator.validate_identity_async
        )

    def configure_external_cookie(options: CookieAuthenticationOptions) -> None:
        options.authentication_type = IdentityAuthenticationTypes.EXTERNAL_COOKIE_AUTHENTICATION_TYPE
        options.authentication_mode = AuthenticationMode.PASSIVE
        options.cookie_name = IdentityAuthenticationTypes.EXTERNAL_COOKIE_AUTHENTICATION_TYPE
        options.expire_timespan = SHORT_LIVED_COOKIE_EXPIRATION

    def configure_two_factor_remember_me_cookie(options: CookieAuthenticationOptions) -> None:
        options.authentication_type = IdentityAuthenticationTypes.TWO_FACTOR_REMEMBER_ME_COOKIE_AUTHENTICATION_TYPE
        options.authentication_mode = AuthenticationMode.PASSIVE
        options.cookie_name = IdentityAuthenticationTypes.TWO_FACTOR_REMEMBER_ME_COOKIE_AUTHENTICATION_TYPE

    def configure_two_factor_user_id_cookie(options: CookieAuthenticationOptions) -> None:
        options.authentication_type = IdentityAuthenticationTypes.TWO_FACTOR_USER_ID_COOKIE_AUTHENTICATION_TYPE
        options.authentication_mode = AuthenticationMode.PASSIVE
        options.cookie_name = IdentityAuthenticationTypes.TWO_FACTOR_USER_ID_COOKIE_AUTHENTICATION_TYPE
        options.expire_timespan = SHORT_LIVED_COOKIE_EXPIRATION

    services.configure(
        CookieAuthenticationOptions,
        configure_application_cookie,
        name=IdentityAuthenticationTypes.APPLICATION_COOKIE_AUTHENTICATION_TYPE,
    )
    services.configure(
        CookieAuthenticationOptions,
        configure_external_cookie,
        name=IdentityAuthenticationTypes.EXTERNAL_COOKIE_AUTHENTICATION_TYPE,
    )
    services.configure(
        CookieAuthenticationOptions,
        configure_two_factor_remember_me_cookie,
        name=IdentityAuthenticationTypes.TWO_FACTOR_REMEMBER_ME_COOKIE_AUTHENTICATION_TYPE,
    )
    services.configure(
        CookieAuthenticationOptions,
        configure_two_factor_user_id_cookie,
        name=IdentityAuthenticationTypes.TWO_FACTOR_USER_ID_COOKIE_AUTHENTICATION_TYPE,
    )

    logger.info(
        f"Identity composed for user type {getattr(user_type, '__name__', user_type)} "
        f"and role type {getattr(role_type, '__name__', role_type)}"
    )
    return IdentityBuilder(user_type, role_type, services)


def add_identity(
    services: ServiceCollection,
    identity_config: Optional[ConfigurationSection] = None,
    configure_options: Optional[Callable[[IdentityOptions], Any]] = None,
    use_default_sub_key: bool = True,
) -> IdentityBuilder:
    """Compose identity with the default IdentityUser and IdentityRole types."""
    return compose_identity(
        services,
        IdentityUser,
        IdentityRole,
        identity_config=identity_config,
        configure_options=configure_options,
        use_default_sub_key=use_default_sub_key,
    )
