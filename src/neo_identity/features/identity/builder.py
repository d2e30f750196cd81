"""Fluent follow-on configuration after composing identity."""

from typing import Any, Optional

from ...config.source import ConfigurationSection
from ...dependency_injection import ServiceCollection, ServiceDescriber, ServiceLifetime
from ...infrastructure.data_protection import add_data_protection
from .entities.protocols import (
    ClaimsIdentityFactoryProtocol,
    PasswordHasherProtocol,
    PasswordValidatorProtocol,
    RoleStoreProtocol,
    UserStoreProtocol,
    UserValidatorProtocol,
)
from .services import IdentityErrorDescriber, RoleManager, SignInManager, UserManager


class IdentityBuilder:
    """Handle over the composed user type, role type and services.

    Registrations made through the builder replace whatever is registered
    for the capability, including the composition defaults.
    """

    def __init__(self, user_type: Any, role_type: Any, services: ServiceCollection):
        self.user_type = user_type
        self.role_type = role_type
        self.services = services
        self._describe = ServiceDescriber()

    def __repr__(self) -> str:
        return f"IdentityBuilder(user_type={self.user_type!r}, role_type={self.role_type!r})"

    def _add(self, service_type: Any, implementation_type: Any, lifetime: ServiceLifetime) -> "IdentityBuilder":
        self.services.add(self._describe.describe(service_type, implementation_type, lifetime))
        return self

    def add_user_store(self, store_type: Any) -> "IdentityBuilder":
        return self._add(UserStoreProtocol[self.user_type], store_type, ServiceLifetime.SCOPED)

    def add_role_store(self, store_type: Any) -> "IdentityBuilder":
        return self._add(RoleStoreProtocol[self.role_type], store_type, ServiceLifetime.SCOPED)

    def add_user_validator(self, validator_type: Any) -> "IdentityBuilder":
        return self._add(UserValidatorProtocol[self.user_type], validator_type, ServiceLifetime.TRANSIENT)

    def add_password_validator(self, validator_type: Any) -> "IdentityBuilder":
        return self._add(PasswordValidatorProtocol[self.user_type], validator_type, ServiceLifetime.TRANSIENT)

    def add_password_hasher(self, hasher_type: Any) -> "IdentityBuilder":
        return self._add(PasswordHasherProtocol[self.user_type], hasher_type, ServiceLifetime.TRANSIENT)

    def add_error_describer(self, describer_type: Any) -> "IdentityBuilder":
        return self._add(IdentityErrorDescriber, describer_type, ServiceLifetime.TRANSIENT)

    def add_claims_identity_factory(self, factory_type: Any) -> "IdentityBuilder":
        return self._add(ClaimsIdentityFactoryProtocol[self.user_type], factory_type, ServiceLifetime.SCOPED)

    def add_user_manager(self, manager_type: Any) -> "IdentityBuilder":
        return self._add(UserManager[self.user_type], manager_type, ServiceLifetime.SCOPED)

    def add_role_manager(self, manager_type: Any) -> "IdentityBuilder":
        return self._add(RoleManager[self.role_type], manager_type, ServiceLifetime.SCOPED)

    def add_sign_in_manager(self, manager_type: Any) -> "IdentityBuilder":
        return self._add(SignInManager[self.user_type], manager_type, ServiceLifetime.SCOPED)

    def add_data_protection(self, configuration: Optional[ConfigurationSection] = None) -> "IdentityBuilder":
        add_data_protection(self.services, configuration)
        return self
