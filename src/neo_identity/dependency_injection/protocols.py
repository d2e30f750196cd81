"""Protocols for the external container consumed by neo-identity."""

from abc import abstractmethod
from typing import Any, Optional, Protocol, runtime_checkable


@runtime_checkable
class ServiceProviderProtocol(Protocol):
    """Scoped service resolution provided by the hosting container."""

    @abstractmethod
    def get_service(self, service_type: Any) -> Optional[Any]:
        """Resolve a service by capability, or None when not registered."""
        ...
