"""External configuration source consumed by the identity composition root.

A ``ConfigurationSection`` is a read-only view over a nested mapping with
case-insensitive keys. Sections can be narrowed to sub-keys and bound onto
pydantic models; binding failures surface as ``ConfigBindingError``.
"""

import copy
import logging
import os
from typing import Any, Callable, Dict, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ..core.exceptions import ConfigBindingError

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

PATH_SEPARATOR = ":"


def _normalize_keys(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Lower-case keys recursively so lookups are case-insensitive."""
    normalized: Dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, Mapping):
            value = _normalize_keys(value)
        normalized[str(key).lower()] = value
    return normalized


def _deep_merge(base: Dict[str, Any], overrides: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge ``overrides`` onto ``base`` without dropping sibling keys."""
    merged = dict(base)
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = value
    return merged


class ConfigurationSection:
    """Read-only, case-insensitive view over nested configuration values."""

    def __init__(self, data: Optional[Mapping[str, Any]] = None, path: str = ""):
        self._data = _normalize_keys(data or {})
        self._path = path

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ConfigurationSection":
        """Create a root section from a plain mapping."""
        return cls(data)

    @classmethod
    def from_env(
        cls,
        prefix: str = "NEO_IDENTITY__",
        delimiter: str = "__",
        environ: Optional[Mapping[str, str]] = None,
    ) -> "ConfigurationSection":
        """Build a section from environment variables.

        ``NEO_IDENTITY__IDENTITY__PASSWORD__REQUIRED_LENGTH=8`` becomes
        ``{"identity": {"password": {"required_length": "8"}}}``. Values stay
        strings; pydantic coerces them during binding.
        """
        environ = os.environ if environ is None else environ
        data: Dict[str, Any] = {}
        count = 0

        for key, value in environ.items():
            if not key.upper().startswith(prefix.upper()):
                continue

            parts = [part for part in key[len(prefix):].lower().split(delimiter.lower()) if part]
            if not parts:
                continue

            node = data
            for part in parts[:-1]:
                child = node.get(part)
                if not isinstance(child, dict):
                    child = {}
                    node[part] = child
                node = child
            node[parts[-1]] = value
            count += 1

        logger.debug(f"Loaded {count} configuration values from environment prefix {prefix}")
        return cls(data)

    @property
    def path(self) -> str:
        """Colon separated path of this section from the root."""
        return self._path

    @property
    def key(self) -> str:
        """Last segment of the section path."""
        return self._path.rsplit(PATH_SEPARATOR, 1)[-1]

    def is_empty(self) -> bool:
        return not self._data

    def get(self, key: str, default: Any = None) -> Any:
        """Get a raw value by key."""
        return self._data.get(key.lower(), default)

    def get_section(self, key: str) -> "ConfigurationSection":
        """Narrow to a sub-key.

        A missing or non-mapping sub-key yields an empty section, so binding
        it produces the target's defaults.
        """
        value = self._data.get(key.lower())
        child_path = f"{self._path}{PATH_SEPARATOR}{key}" if self._path else key

        if not isinstance(value, Mapping):
            if value is not None:
                logger.warning(f"Configuration key '{child_path}' is not a section; treating it as empty")
            else:
                logger.debug(f"Configuration section '{child_path}' not found; using an empty section")
            return ConfigurationSection({}, path=child_path)

        return ConfigurationSection(value, path=child_path)

    def as_dict(self) -> Dict[str, Any]:
        """Return a deep copy of the section values."""
        return copy.deepcopy(self._data)

    def bind(self, model_type: Type[M], instance: Optional[M] = None) -> M:
        """Bind this section onto a pydantic model.

        Values from the section override the instance's current values
        (or the model defaults); keys the model does not know follow the
        model's own ``extra`` policy.

        Raises:
            ConfigBindingError: When the values do not validate against the model
        """
        base = instance.model_dump() if instance is not None else {}
        merged = _deep_merge(base, self._data)

        try:
            return model_type.model_validate(merged)
        except ValidationError as e:
            logger.error(f"Failed to bind configuration section '{self._path}' to {model_type.__name__}: {e}")
            raise ConfigBindingError(
                f"Configuration section '{self._path or '<root>'}' cannot be bound to {model_type.__name__}",
                section_path=self._path,
                target=model_type.__name__,
                errors=[
                    {"loc": list(error["loc"]), "msg": error["msg"], "type": error["type"]}
                    for error in e.errors()
                ],
            ) from e

    def binder(self, model_type: Type[M]) -> Callable[[M], M]:
        """Return a configure step that binds this section onto an options instance."""

        def bind_options(options: M) -> M:
            return self.bind(model_type, options)

        return bind_options

    def __contains__(self, key: str) -> bool:
        return key.lower() in self._data

    def __repr__(self) -> str:
        return f"ConfigurationSection(path={self._path!r}, keys={sorted(self._data)})"
