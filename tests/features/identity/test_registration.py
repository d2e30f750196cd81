"""Tests for the identity composition root."""

from dataclasses import dataclass
from datetime import timedelta
from typing import Generic, TypeVar
from unittest.mock import MagicMock

import pytest

from neo_identity.config import ConfigurationSection
from neo_identity.core.exceptions import ConfigBindingError
from neo_identity.dependency_injection import ServiceDescriptor, ServiceLifetime
from neo_identity.dependency_injection.descriptors import service_name
from neo_identity.features.identity import (
    AuthenticationMode,
    CookieAuthenticationOptions,
    ExternalAuthenticationOptions,
    IdentityAuthenticationTypes,
    IdentityBuilder,
    IdentityOptions,
    add_identity,
    compose_identity,
    configure_identity,
)
from neo_identity.features.identity.entities import (
    ClaimsIdentityFactoryProtocol,
    IdentityResult,
    IdentityRole,
    IdentityUser,
    LookupNormalizerProtocol,
    PasswordHasherProtocol,
    PasswordValidatorProtocol,
    RoleValidatorProtocol,
    SecurityStampValidatorProtocol,
    UserValidatorProtocol,
)
from neo_identity.features.identity.services import (
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
from neo_identity.infrastructure import DataProtectionOptions, DataProtectionProvider

TUser = TypeVar("TUser")


@dataclass
class AppUser:
    id: str
    user_name: str


@dataclass
class AppRole:
    id: str
    name: str


class FriendlyErrorDescriber(IdentityErrorDescriber):
    def password_mismatch(self):
        error = super().password_mismatch()
        return type(error)(error.code, "That password did not work.")


class StrictUserValidator(Generic[TUser]):
    async def validate(self, manager, user):
        return IdentityResult.success()


class KeepCaseNormalizer:
    def normalize(self, key):
        return key


def expected_defaults(user_type, role_type):
    return {
        UserValidatorProtocol[user_type]: (UserValidator[user_type], ServiceLifetime.TRANSIENT),
        PasswordValidatorProtocol[user_type]: (PasswordValidator[user_type], ServiceLifetime.TRANSIENT),
        PasswordHasherProtocol[user_type]: (PasswordHasher[user_type], ServiceLifetime.TRANSIENT),
        LookupNormalizerProtocol: (UpperInvariantLookupNormalizer, ServiceLifetime.TRANSIENT),
        RoleValidatorProtocol[role_type]: (RoleValidator[role_type], ServiceLifetime.TRANSIENT),
        IdentityErrorDescriber: (IdentityErrorDescriber, ServiceLifetime.TRANSIENT),
        SecurityStampValidatorProtocol: (SecurityStampValidator[user_type], ServiceLifetime.SCOPED),
        ClaimsIdentityFactoryProtocol[user_type]: (
            ClaimsIdentityFactory[user_type, role_type],
            ServiceLifetime.SCOPED,
        ),
        UserManager[user_type]: (UserManager[user_type], ServiceLifetime.SCOPED),
        SignInManager[user_type]: (SignInManager[user_type], ServiceLifetime.SCOPED),
        RoleManager[role_type]: (RoleManager[role_type], ServiceLifetime.SCOPED),
    }


class TestDefaultRegistrations:
    """Test the default capability registrations."""

    def test_registers_eleven_defaults(self, services):
        compose_identity(services, AppUser, AppRole)

        expected = expected_defaults(AppUser, AppRole)
        assert len(services) == 11
        assert set(services.service_types()) == set(expected)

        for service_type, (implementation, lifetime) in expected.items():
            descriptor = services.get(service_type)
            assert descriptor.implementation_type == implementation, service_name(service_type)
            assert descriptor.lifetime is lifetime, service_name(service_type)

    def test_registers_five_configure_steps(self, services):
        compose_identity(services, AppUser, AppRole)

        steps = services.configure_steps()
        assert len(steps) == 5
        assert steps[0].options_type is ExternalAuthenticationOptions
        assert [step.name for step in steps[1:]] == list(IdentityAuthenticationTypes.all())
        assert all(step.options_type is CookieAuthenticationOptions for step in steps[1:])

    def test_data_protection_is_opt_in(self, services):
        compose_identity(services, AppUser, AppRole)

        assert DataProtectionProvider not in services
        assert services.configure_steps(DataProtectionOptions) == []

    def test_authentication_types(self):
        types = IdentityAuthenticationTypes.all()

        assert isinstance(types, tuple)
        assert len(types) == 4
        assert all(isinstance(t, str) for t in types)

    def test_builder_carries_supplied_types(self, services):
        builder = compose_identity(services, AppUser, AppRole)

        assert isinstance(builder, IdentityBuilder)
        assert builder.user_type is AppUser
        assert builder.role_type is AppRole
        assert builder.services is services

    def test_existing_registration_is_kept(self, services):
        services.add(
            ServiceDescriptor(LookupNormalizerProtocol, ServiceLifetime.SINGLETON, implementation_type=KeepCaseNormalizer)
        )
        compose_identity(services, AppUser, AppRole)

        descriptor = services.get(LookupNormalizerProtocol)
        assert descriptor.implementation_type is KeepCaseNormalizer
        assert descriptor.lifetime is ServiceLifetime.SINGLETON
        assert len(services) == 11

    def test_user_types_register_separately(self, services):
        compose_identity(services, AppUser, AppRole)
        compose_identity(services, IdentityUser, IdentityRole)

        # The normalizer, describer and stamp validator are shared
        assert len(services) == 19
        assert UserManager[AppUser] in services
        assert UserManager[IdentityUser] in services


class TestRepeatedComposition:
    """Test composing twice against one registry."""

    def test_registrations_are_idempotent_but_steps_accumulate(self, services):
        compose_identity(services, AppUser, AppRole)
        before = {descriptor.service_type: descriptor for descriptor in services}

        compose_identity(services, AppUser, AppRole)

        assert len(services) == 11
        for descriptor in services:
            assert before[descriptor.service_type] is descriptor
        assert len(services.configure_steps()) == 10

    def test_second_call_callback_runs_once_after_binding(self, services):
        calls = []

        def configure(options):
            calls.append(options.password.required_length)
            options.password.required_length += 1

        compose_identity(services, AppUser, AppRole)
        compose_identity(
            services,
            AppUser,
            AppRole,
            identity_config=ConfigurationSection({"identity": {"password": {"required_length": 8}}}),
            configure_options=configure,
        )

        options = services.get_options(IdentityOptions[AppUser])
        assert calls == [8]
        assert options.password.required_length == 9
        assert len(services.configure_steps(IdentityOptions[AppUser])) == 2
        assert len(services.configure_steps()) == 12


class TestCookieConfiguration:
    """Test the options produced by the cookie configure steps."""

    def test_application_cookie(self, services):
        compose_identity(services, AppUser, AppRole)

        options = services.get_options(
            CookieAuthenticationOptions, IdentityAuthenticationTypes.APPLICATION_COOKIE_AUTHENTICATION_TYPE
        )
        assert options.authentication_type == "ApplicationCookie"
        assert options.authentication_mode is AuthenticationMode.ACTIVE
        assert options.login_path == "/Account/Login"
        assert options.cookie_name is None
        assert options.effective_cookie_name == ".Neo.ApplicationCookie"
        assert options.notifications.on_validate_identity is SecurityStampValidator.validate_identity_async

    def test_external_cookie(self, services):
        compose_identity(services, AppUser, AppRole)

        options = services.get_options(
            CookieAuthenticationOptions, IdentityAuthenticationTypes.EXTERNAL_COOKIE_AUTHENTICATION_TYPE
        )
        assert options.authentication_type == "ExternalCookie"
        assert options.authentication_mode is AuthenticationMode.PASSIVE
        assert options.cookie_name == "ExternalCookie"
        assert options.expire_timespan == timedelta(minutes=5)

    def test_two_factor_remember_me_cookie(self, services):
        compose_identity(services, AppUser, AppRole)

        options = services.get_options(
            CookieAuthenticationOptions, IdentityAuthenticationTypes.TWO_FACTOR_REMEMBER_ME_COOKIE_AUTHENTICATION_TYPE
        )
        assert options.authentication_type == "TwoFactorRememberMeCookie"
        assert options.authentication_mode is AuthenticationMode.PASSIVE
        assert options.cookie_name == "TwoFactorRememberMeCookie"
        # Remember-me keeps the default lifetime
        assert options.expire_timespan == timedelta(days=14)

    def test_two_factor_user_id_cookie(self, services):
        compose_identity(services, AppUser, AppRole)

        options = services.get_options(
            CookieAuthenticationOptions, IdentityAuthenticationTypes.TWO_FACTOR_USER_ID_COOKIE_AUTHENTICATION_TYPE
        )
        assert options.authentication_type == "TwoFactorUserIdCookie"
        assert options.authentication_mode is AuthenticationMode.PASSIVE
        assert options.cookie_name == "TwoFactorUserIdCookie"
        assert options.expire_timespan == timedelta(minutes=5)

    def test_unnamed_cookie_options_are_untouched(self, services):
        compose_identity(services, AppUser, AppRole)

        options = services.get_options(CookieAuthenticationOptions)
        assert options == CookieAuthenticationOptions()

    def test_external_sign_in_type(self, services):
        compose_identity(services, AppUser, AppRole)

        options = services.get_options(ExternalAuthenticationOptions)
        assert options.sign_in_as_authentication_type == "ExternalCookie"


class TestConfigurationBinding:
    """Test binding external configuration onto the identity options."""

    def test_identity_sub_key_is_used(self, services):
        config = ConfigurationSection({
            "identity": {"password": {"required_length": 12}, "lockout": {"max_failed_access_attempts": 3}},
            "password": {"required_length": 99},
        })

        compose_identity(services, AppUser, AppRole, identity_config=config)

        options = services.get_options(IdentityOptions[AppUser])
        assert options.password.required_length == 12
        assert options.lockout.max_failed_access_attempts == 3
        assert len(services.configure_steps()) == 6

    def test_narrows_through_get_section(self, services):
        config = MagicMock(spec=ConfigurationSection)
        config.get_section.return_value = ConfigurationSection({"user": {"require_unique_email": True}}, path="identity")

        compose_identity(services, AppUser, AppRole, identity_config=config)

        config.get_section.assert_called_once_with("identity")
        assert services.get_options(IdentityOptions[AppUser]).user.require_unique_email is True

    def test_root_is_bound_without_sub_key(self, services):
        config = ConfigurationSection({"password": {"required_length": 10}})

        compose_identity(services, AppUser, AppRole, identity_config=config, use_default_sub_key=False)

        assert services.get_options(IdentityOptions[AppUser]).password.required_length == 10

    def test_sub_key_is_always_identity(self, services, monkeypatch):
        monkeypatch.setenv("NEO_IDENTITY_IDENTITY_SECTION", "auth")
        config = ConfigurationSection({
            "auth": {"password": {"required_length": 11}},
            "identity": {"password": {"required_length": 9}},
        })

        compose_identity(services, AppUser, AppRole, identity_config=config)

        assert services.get_options(IdentityOptions[AppUser]).password.required_length == 9

    def test_missing_section_binds_defaults(self, services):
        config = ConfigurationSection({"logging": {"level": "debug"}})

        compose_identity(services, AppUser, AppRole, identity_config=config)

        assert services.get_options(IdentityOptions[AppUser]) == IdentityOptions[AppUser]()

    def test_edits_to_exported_values_do_not_reach_options(self, services):
        config = ConfigurationSection({"identity": {"password": {"required_length": 8}}})
        config.as_dict()["identity"]["password"]["required_length"] = 99

        compose_identity(services, AppUser, AppRole, identity_config=config)

        assert services.get_options(IdentityOptions[AppUser]).password.required_length == 8

    def test_options_are_per_user_type(self, services):
        config = ConfigurationSection({"identity": {"password": {"required_length": 12}}})

        compose_identity(services, AppUser, AppRole, identity_config=config)
        compose_identity(services, IdentityUser, IdentityRole)

        assert services.get_options(IdentityOptions[AppUser]).password.required_length == 12
        assert services.get_options(IdentityOptions[IdentityUser]).password.required_length == 6

    def test_bad_shape_fails_before_registering(self, services):
        config = ConfigurationSection({"identity": {"password": {"required_length": "long"}}})

        with pytest.raises(ConfigBindingError) as exc_info:
            compose_identity(services, AppUser, AppRole, identity_config=config)

        assert exc_info.value.section_path == "identity"
        assert len(services) == 0
        assert services.configure_steps() == []

    def test_configured_describer_override(self, services):
        config = ConfigurationSection({
            "identity": {service_name(IdentityErrorDescriber): f"{__name__}:FriendlyErrorDescriber"}
        })

        compose_identity(services, AppUser, AppRole, identity_config=config)

        assert services.get(IdentityErrorDescriber).implementation_type is FriendlyErrorDescriber
        assert len(services) == 11

    def test_configured_generic_override_is_closed(self, services):
        config = ConfigurationSection({
            "identity": {service_name(UserValidatorProtocol): f"{__name__}:StrictUserValidator"}
        })

        compose_identity(services, AppUser, AppRole, identity_config=config)

        descriptor = services.get(UserValidatorProtocol[AppUser])
        assert descriptor.implementation_type == StrictUserValidator[AppUser]
        assert descriptor.lifetime is ServiceLifetime.TRANSIENT


class TestConvenienceEntryPoints:
    """Test add_identity and configure_identity."""

    def test_add_identity_uses_default_types(self, services):
        builder = add_identity(services)

        assert builder.user_type is IdentityUser
        assert builder.role_type is IdentityRole
        assert set(services.service_types()) == set(expected_defaults(IdentityUser, IdentityRole))

    def test_configure_identity_after_composition_wins(self, services):
        config = ConfigurationSection({"identity": {"password": {"required_length": 12}}})
        add_identity(services, identity_config=config)

        def require_longer(options):
            options.password.required_length = 20

        configure_identity(services, IdentityUser, require_longer)

        assert services.get_options(IdentityOptions[IdentityUser]).password.required_length == 20

    def test_callback_may_return_replacement(self, services):
        replacement = IdentityOptions[IdentityUser]()
        replacement.sign_in.require_confirmed_email = True

        add_identity(services, configure_options=lambda options: replacement)

        assert services.get_options(IdentityOptions[IdentityUser]).sign_in.require_confirmed_email is True
