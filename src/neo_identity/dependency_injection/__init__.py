"""Service registration primitives used by the identity composition root."""

from .descriptors import (
    ServiceLifetime,
    ServiceDescriptor,
    ServiceDescriber,
    service_name,
    import_implementation,
)
from .collection import (
    ServiceCollection,
    ConfigureOptions,
    DEFAULT_OPTIONS_NAME,
)
from .protocols import ServiceProviderProtocol

__all__ = [
    "ServiceLifetime",
    "ServiceDescriptor",
    "ServiceDescriber",
    "service_name",
    "import_implementation",
    "ServiceCollection",
    "ConfigureOptions",
    "DEFAULT_OPTIONS_NAME",
    "ServiceProviderProtocol",
]
