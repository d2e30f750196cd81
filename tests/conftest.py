"""Pytest configuration and fixtures for neo-identity tests."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Set

import pytest

from neo_identity.dependency_injection import ServiceCollection
from neo_identity.features.identity.entities import (
    ClaimsIdentity,
    IdentityError,
    IdentityResult,
    IdentityRole,
    IdentityUser,
)
from neo_identity.features.identity.options import IdentityOptions
from neo_identity.features.identity.services import (
    ClaimsIdentityFactory,
    PasswordHasher,
    PasswordValidator,
    RoleManager,
    RoleValidator,
    SignInManager,
    UserManager,
    UserValidator,
)


class MinimalUserStore:
    """User store implementing only the required operations."""

    def __init__(self):
        self.users: Dict[str, IdentityUser] = {}

    async def get_user_id(self, user: IdentityUser) -> str:
        return user.id

    async def get_user_name(self, user: IdentityUser) -> Optional[str]:
        return user.user_name

    async def set_user_name(self, user: IdentityUser, user_name: Optional[str]) -> None:
        user.user_name = user_name

    async def get_normalized_user_name(self, user: IdentityUser) -> Optional[str]:
        return user.normalized_user_name

    async def set_normalized_user_name(self, user: IdentityUser, normalized_name: Optional[str]) -> None:
        user.normalized_user_name = normalized_name

    async def create(self, user: IdentityUser) -> IdentityResult:
        if user.id in self.users:
            return IdentityResult.failed(IdentityError("DuplicateId", f"User {user.id} already exists."))
        self.users[user.id] = user
        return IdentityResult.success()

    async def update(self, user: IdentityUser) -> IdentityResult:
        self.users[user.id] = user
        return IdentityResult.success()

    async def delete(self, user: IdentityUser) -> IdentityResult:
        self.users.pop(user.id, None)
        return IdentityResult.success()

    async def find_by_id(self, user_id: str) -> Optional[IdentityUser]:
        return self.users.get(user_id)

    async def find_by_name(self, normalized_user_name: str) -> Optional[IdentityUser]:
        for user in self.users.values():
            if user.normalized_user_name == normalized_user_name:
                return user
        return None


class InMemoryUserStore(MinimalUserStore):
    """User store implementing every optional capability."""

    def __init__(self):
        super().__init__()
        self.user_roles: Dict[str, Set[str]] = {}

    # Passwords
    async def set_password_hash(self, user: IdentityUser, password_hash: Optional[str]) -> None:
        user.password_hash = password_hash

    async def get_password_hash(self, user: IdentityUser) -> Optional[str]:
        return user.password_hash

    async def has_password(self, user: IdentityUser) -> bool:
        return user.password_hash is not None

    # Security stamps
    async def set_security_stamp(self, user: IdentityUser, stamp: str) -> None:
        user.security_stamp = stamp

    async def get_security_stamp(self, user: IdentityUser) -> Optional[str]:
        return user.security_stamp

    # Email
    async def set_email(self, user: IdentityUser, email: Optional[str]) -> None:
        user.email = email

    async def get_email(self, user: IdentityUser) -> Optional[str]:
        return user.email

    async def get_normalized_email(self, user: IdentityUser) -> Optional[str]:
        return user.normalized_email

    async def set_normalized_email(self, user: IdentityUser, normalized_email: Optional[str]) -> None:
        user.normalized_email = normalized_email

    async def get_email_confirmed(self, user: IdentityUser) -> bool:
        return user.email_confirmed

    async def set_email_confirmed(self, user: IdentityUser, confirmed: bool) -> None:
        user.email_confirmed = confirmed

    async def find_by_email(self, normalized_email: str) -> Optional[IdentityUser]:
        for user in self.users.values():
            if user.normalized_email == normalized_email:
                return user
        return None

    # Phone numbers
    async def get_phone_number(self, user: IdentityUser) -> Optional[str]:
        return user.phone_number

    async def set_phone_number(self, user: IdentityUser, phone_number: Optional[str]) -> None:
        user.phone_number = phone_number

    async def get_phone_number_confirmed(self, user: IdentityUser) -> bool:
        return user.phone_number_confirmed

    async def set_phone_number_confirmed(self, user: IdentityUser, confirmed: bool) -> None:
        user.phone_number_confirmed = confirmed

    # Roles
    async def add_to_role(self, user: IdentityUser, normalized_role_name: str) -> None:
        self.user_roles.setdefault(user.id, set()).add(normalized_role_name)

    async def remove_from_role(self, user: IdentityUser, normalized_role_name: str) -> None:
        self.user_roles.get(user.id, set()).discard(normalized_role_name)

    async def get_roles(self, user: IdentityUser) -> List[str]:
        return sorted(self.user_roles.get(user.id, set()))

    async def is_in_role(self, user: IdentityUser, normalized_role_name: str) -> bool:
        return normalized_role_name in self.user_roles.get(user.id, set())

    # Lockout
    async def get_lockout_end_date(self, user: IdentityUser) -> Optional[datetime]:
        return user.lockout_end

    async def set_lockout_end_date(self, user: IdentityUser, lockout_end: Optional[datetime]) -> None:
        user.lockout_end = lockout_end

    async def increment_access_failed_count(self, user: IdentityUser) -> int:
        user.access_failed_count += 1
        return user.access_failed_count

    async def reset_access_failed_count(self, user: IdentityUser) -> None:
        user.access_failed_count = 0

    async def get_access_failed_count(self, user: IdentityUser) -> int:
        return user.access_failed_count

    async def get_lockout_enabled(self, user: IdentityUser) -> bool:
        return user.lockout_enabled

    async def set_lockout_enabled(self, user: IdentityUser, enabled: bool) -> None:
        user.lockout_enabled = enabled

    # Two-factor
    async def set_two_factor_enabled(self, user: IdentityUser, enabled: bool) -> None:
        user.two_factor_enabled = enabled

    async def get_two_factor_enabled(self, user: IdentityUser) -> bool:
        return user.two_factor_enabled


class InMemoryRoleStore:
    """Role store keeping roles in a dictionary."""

    def __init__(self):
        self.roles: Dict[str, IdentityRole] = {}

    async def create(self, role: IdentityRole) -> IdentityResult:
        self.roles[role.id] = role
        return IdentityResult.success()

    async def update(self, role: IdentityRole) -> IdentityResult:
        self.roles[role.id] = role
        return IdentityResult.success()

    async def delete(self, role: IdentityRole) -> IdentityResult:
        self.roles.pop(role.id, None)
        return IdentityResult.success()

    async def get_role_id(self, role: IdentityRole) -> str:
        return role.id

    async def get_role_name(self, role: IdentityRole) -> Optional[str]:
        return role.name

    async def set_role_name(self, role: IdentityRole, role_name: Optional[str]) -> None:
        role.name = role_name

    async def get_normalized_role_name(self, role: IdentityRole) -> Optional[str]:
        return role.normalized_name

    async def set_normalized_role_name(self, role: IdentityRole, normalized_name: Optional[str]) -> None:
        role.normalized_name = normalized_name

    async def find_by_id(self, role_id: str) -> Optional[IdentityRole]:
        return self.roles.get(role_id)

    async def find_by_name(self, normalized_role_name: str) -> Optional[IdentityRole]:
        for role in self.roles.values():
            if role.normalized_name == normalized_role_name:
                return role
        return None


@dataclass
class FakeAuthenticationManager:
    """Records cookie sign-ins and sign-outs instead of writing cookies."""
    cookies: Dict[str, ClaimsIdentity] = field(default_factory=dict)
    sign_ins: List[Any] = field(default_factory=list)
    sign_outs: List[str] = field(default_factory=list)

    async def sign_in(self, authentication_type: str, identity: ClaimsIdentity, is_persistent: bool = False) -> None:
        self.cookies[authentication_type] = identity
        self.sign_ins.append((authentication_type, identity, is_persistent))

    async def sign_out(self, *authentication_types: str) -> None:
        for authentication_type in authentication_types:
            self.cookies.pop(authentication_type, None)
            self.sign_outs.append(authentication_type)

    async def authenticate(self, authentication_type: str) -> Optional[ClaimsIdentity]:
        return self.cookies.get(authentication_type)


class DictServiceProvider:
    """Service provider backed by a dictionary of resolved services."""

    def __init__(self, services: Optional[Dict[Any, Any]] = None):
        self.services = services or {}

    def get_service(self, service_type: Any) -> Optional[Any]:
        return self.services.get(service_type)


@pytest.fixture
def services():
    """Fresh service collection."""
    return ServiceCollection()


@pytest.fixture
def identity_options():
    """Identity options with lockout enabled for new users."""
    options = IdentityOptions[IdentityUser]()
    options.lockout.enabled_by_default = True
    return options


@pytest.fixture
def user_store():
    return InMemoryUserStore()


@pytest.fixture
def role_store():
    return InMemoryRoleStore()


@pytest.fixture
def password_hasher():
    # Fewer iterations keep the suite fast
    return PasswordHasher(iterations=1000)


@pytest.fixture
def user_manager(user_store, identity_options, password_hasher):
    return UserManager(
        user_store,
        options=identity_options,
        password_hasher=password_hasher,
        user_validators=[UserValidator(identity_options)],
        password_validators=[PasswordValidator(identity_options)],
    )


@pytest.fixture
def role_manager(role_store):
    return RoleManager(role_store, role_validators=[RoleValidator()])


@pytest.fixture
def authentication_manager():
    return FakeAuthenticationManager()


@pytest.fixture
def claims_factory(user_manager, role_manager, identity_options):
    return ClaimsIdentityFactory(user_manager, role_manager, identity_options)


@pytest.fixture
def sign_in_manager(user_manager, authentication_manager, claims_factory, identity_options):
    return SignInManager(user_manager, authentication_manager, claims_factory, identity_options)


@pytest.fixture
def sample_user():
    """Unsaved user with an email address."""
    return IdentityUser(user_name="alice", email="alice@example.com")


@pytest.fixture
def minimal_user_store():
    """Store without any optional capability."""
    return MinimalUserStore()


@pytest.fixture
def service_provider():
    return DictServiceProvider()
