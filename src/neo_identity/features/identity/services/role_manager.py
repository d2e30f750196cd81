"""Role manager - store-backed role operations."""

import logging
from typing import Generic, List, Optional, Sequence

from ..entities.protocols import LookupNormalizerProtocol, RoleStoreProtocol, RoleValidatorProtocol, TRole
from ..entities.results import IdentityError, IdentityResult
from .error_describer import IdentityErrorDescriber
from .lookup_normalizer import UpperInvariantLookupNormalizer

logger = logging.getLogger(__name__)


class RoleManager(Generic[TRole]):
    """Manages roles through a role store."""

    def __init__(
        self,
        store: RoleStoreProtocol[TRole],
        role_validators: Optional[Sequence[RoleValidatorProtocol[TRole]]] = None,
        key_normalizer: Optional[LookupNormalizerProtocol] = None,
        error_describer: Optional[IdentityErrorDescriber] = None,
    ):
        if store is None:
            raise ValueError("store is required")
        self.store = store
        self.role_validators = list(role_validators or [])
        self.key_normalizer = key_normalizer or UpperInvariantLookupNormalizer()
        self.error_describer = error_describer or IdentityErrorDescriber()

    def normalize_key(self, key: Optional[str]) -> Optional[str]:
        return self.key_normalizer.normalize(key)

    async def validate_role(self, role: TRole) -> IdentityResult:
        errors: List[IdentityError] = []
        for validator in self.role_validators:
            result = await validator.validate(self, role)
            errors.extend(result.errors)

        if errors:
            logger.warning(
                f"Role {await self.get_role_id(role)} validation failed: "
                + ", ".join(error.code for error in errors)
            )
            return IdentityResult.failed(*errors)
        return IdentityResult.success()

    async def create(self, role: TRole) -> IdentityResult:
        result = await self.validate_role(role)
        if not result.succeeded:
            return result

        await self.update_normalized_role_name(role)
        result = await self.store.create(role)
        if result.succeeded:
            logger.info(f"Created role {await self.get_role_name(role)}")
        return result

    async def update(self, role: TRole) -> IdentityResult:
        result = await self.validate_role(role)
        if not result.succeeded:
            return result

        await self.update_normalized_role_name(role)
        return await self.store.update(role)

    async def delete(self, role: TRole) -> IdentityResult:
        return await self.store.delete(role)

    async def role_exists(self, role_name: str) -> bool:
        return await self.find_by_name(role_name) is not None

    async def find_by_id(self, role_id: str) -> Optional[TRole]:
        return await self.store.find_by_id(role_id)

    async def find_by_name(self, role_name: str) -> Optional[TRole]:
        if role_name is None:
            raise ValueError("role_name is required")
        return await self.store.find_by_name(self.normalize_key(role_name))

    async def get_role_id(self, role: TRole) -> str:
        return await self.store.get_role_id(role)

    async def get_role_name(self, role: TRole) -> Optional[str]:
        return await self.store.get_role_name(role)

    async def set_role_name(self, role: TRole, name: Optional[str]) -> IdentityResult:
        await self.store.set_role_name(role, name)
        return await self.update(role)

    async def update_normalized_role_name(self, role: TRole) -> None:
        name = await self.get_role_name(role)
        await self.store.set_normalized_role_name(role, self.normalize_key(name))
