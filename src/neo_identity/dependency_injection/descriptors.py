"""Service descriptors and the describer that builds them.

A descriptor pairs a capability identifier (the service type) with the
implementation that fulfils it and the lifetime the container should give
it. Capability identifiers may be plain classes or parameterised generic
aliases such as ``UserValidatorProtocol[AppUser]``.
"""

import importlib
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, get_args, get_origin

from ..core.exceptions import ServiceRegistrationError

logger = logging.getLogger(__name__)


class ServiceLifetime(Enum):
    """Scope of object reuse applied by the container."""
    TRANSIENT = "transient"  # New instance per resolution
    SCOPED = "scoped"        # One instance per logical request/session
    SINGLETON = "singleton"  # One instance for the process lifetime


def service_name(service_type: Any) -> str:
    """Dotted name of a service type; generic arguments are ignored."""
    origin = get_origin(service_type) or service_type
    module = getattr(origin, "__module__", None)
    qualname = getattr(origin, "__qualname__", None) or getattr(origin, "__name__", None)
    if module and qualname:
        return f"{module}.{qualname}"
    return repr(service_type)


@dataclass(frozen=True)
class ServiceDescriptor:
    """Registration entry: capability, implementation and lifetime."""
    service_type: Any
    lifetime: ServiceLifetime
    implementation_type: Any = None
    implementation_factory: Optional[Callable[..., Any]] = None
    implementation_instance: Any = None

    def __post_init__(self):
        provided = [
            value for value in (
                self.implementation_type,
                self.implementation_factory,
                self.implementation_instance,
            )
            if value is not None
        ]
        if len(provided) != 1:
            raise ServiceRegistrationError(
                "A service descriptor needs exactly one of implementation type, factory or instance",
                service_type=service_name(self.service_type),
            )
        if self.implementation_instance is not None and self.lifetime is not ServiceLifetime.SINGLETON:
            raise ServiceRegistrationError(
                "Instance registrations must be singletons",
                service_type=service_name(self.service_type),
            )

    @classmethod
    def from_type(cls, service_type: Any, implementation_type: Any, lifetime: ServiceLifetime) -> "ServiceDescriptor":
        return cls(service_type=service_type, lifetime=lifetime, implementation_type=implementation_type)

    @classmethod
    def from_factory(
        cls,
        service_type: Any,
        implementation_factory: Callable[..., Any],
        lifetime: ServiceLifetime = ServiceLifetime.TRANSIENT,
    ) -> "ServiceDescriptor":
        return cls(service_type=service_type, lifetime=lifetime, implementation_factory=implementation_factory)

    @classmethod
    def from_instance(cls, service_type: Any, implementation_instance: Any) -> "ServiceDescriptor":
        return cls(
            service_type=service_type,
            lifetime=ServiceLifetime.SINGLETON,
            implementation_instance=implementation_instance,
        )

    @property
    def implementation(self) -> Any:
        """Whichever of type, factory or instance backs this descriptor."""
        if self.implementation_type is not None:
            return self.implementation_type
        if self.implementation_factory is not None:
            return self.implementation_factory
        return self.implementation_instance

    def __repr__(self) -> str:
        return (
            f"ServiceDescriptor({service_name(self.service_type)} -> "
            f"{service_name(self.implementation)}, {self.lifetime.value})"
        )


def import_implementation(path: str) -> Any:
    """Import ``package.module:Name`` or ``package.module.Name``."""
    if ":" in path:
        module_name, _, attribute = path.partition(":")
    else:
        module_name, _, attribute = path.rpartition(".")

    if not module_name or not attribute:
        raise ServiceRegistrationError(f"Invalid implementation path '{path}'")

    try:
        module = importlib.import_module(module_name)
        return getattr(module, attribute)
    except (ImportError, AttributeError) as e:
        raise ServiceRegistrationError(
            f"Cannot import implementation '{path}': {e}",
            details={"path": path},
        ) from e


class ServiceDescriber:
    """Build descriptors, letting configuration replace implementation types.

    When the configuration holds a key equal to the dotted name of a
    service type, its value is imported and used as the implementation.
    Generic implementations are closed over the service's type arguments.
    """

    def __init__(self, configuration: Optional[Any] = None):
        self.configuration = configuration

    def transient(self, service_type: Any, implementation_type: Any = None) -> ServiceDescriptor:
        return self.describe(service_type, implementation_type or service_type, ServiceLifetime.TRANSIENT)

    def scoped(self, service_type: Any, implementation_type: Any = None) -> ServiceDescriptor:
        return self.describe(service_type, implementation_type or service_type, ServiceLifetime.SCOPED)

    def singleton(self, service_type: Any, implementation_type: Any = None) -> ServiceDescriptor:
        return self.describe(service_type, implementation_type or service_type, ServiceLifetime.SINGLETON)

    def instance(self, service_type: Any, implementation_instance: Any) -> ServiceDescriptor:
        return ServiceDescriptor.from_instance(service_type, implementation_instance)

    def factory(
        self,
        service_type: Any,
        implementation_factory: Callable[..., Any],
        lifetime: ServiceLifetime = ServiceLifetime.TRANSIENT,
    ) -> ServiceDescriptor:
        return ServiceDescriptor.from_factory(service_type, implementation_factory, lifetime)

    def describe(self, service_type: Any, implementation_type: Any, lifetime: ServiceLifetime) -> ServiceDescriptor:
        """Describe a type registration, honouring configured overrides."""
        override = self._configured_implementation(service_type)
        if override is not None:
            implementation_type = override

        return ServiceDescriptor.from_type(service_type, implementation_type, lifetime)

    def _configured_implementation(self, service_type: Any) -> Any:
        if self.configuration is None:
            return None

        name = service_name(service_type)
        path = self.configuration.get(name)
        if not path:
            return None

        implementation = import_implementation(str(path))
        type_args = get_args(service_type)
        parameters = getattr(implementation, "__parameters__", ())
        if type_args and parameters and len(parameters) == len(type_args):
            implementation = implementation[type_args]

        logger.info(f"Configuration overrides {name} with {path}")
        return implementation
