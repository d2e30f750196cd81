"""Service registry threaded through composition.

``ServiceCollection`` keeps at most one descriptor per capability and an
ordered list of options configure steps. It is a single-owner builder
value: composition runs once, synchronously, during start-up, and the
collection is not synchronised for concurrent writers.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Optional, Type, TypeVar

from .descriptors import ServiceDescriptor, service_name

logger = logging.getLogger(__name__)

O = TypeVar("O")

DEFAULT_OPTIONS_NAME = ""


@dataclass(frozen=True)
class ConfigureOptions:
    """One configure step for an options type, optionally named."""
    options_type: Any
    name: str
    action: Callable[[Any], Any]

    def apply(self, options: Any) -> Any:
        """Run the action; a returned instance replaces the options."""
        result = self.action(options)
        return options if result is None else result


class ServiceCollection:
    """Registry of service descriptors and options configure steps."""

    def __init__(self):
        self._descriptors: Dict[Any, ServiceDescriptor] = {}
        self._configure_steps: List[ConfigureOptions] = []

    # Registrations

    def add(self, descriptor: ServiceDescriptor) -> "ServiceCollection":
        """Register a descriptor, replacing any existing one for the capability."""
        if descriptor.service_type in self._descriptors:
            logger.debug(f"Replacing registration for {service_name(descriptor.service_type)}")
        self._descriptors[descriptor.service_type] = descriptor
        return self

    def try_add(self, descriptor: ServiceDescriptor) -> bool:
        """Register a descriptor only if the capability is not registered yet.

        Returns:
            True when the descriptor was added, False when one already existed
        """
        if descriptor.service_type in self._descriptors:
            logger.debug(
                f"Keeping existing registration for {service_name(descriptor.service_type)}"
            )
            return False

        self._descriptors[descriptor.service_type] = descriptor
        logger.debug(f"Registered {descriptor!r}")
        return True

    def remove(self, service_type: Any) -> Optional[ServiceDescriptor]:
        """Remove and return the registration for a capability, if any."""
        return self._descriptors.pop(service_type, None)

    def get(self, service_type: Any) -> Optional[ServiceDescriptor]:
        return self._descriptors.get(service_type)

    def service_types(self) -> List[Any]:
        """Registered capabilities in registration order."""
        return list(self._descriptors)

    def __contains__(self, service_type: Any) -> bool:
        return service_type in self._descriptors

    def __len__(self) -> int:
        return len(self._descriptors)

    def __iter__(self) -> Iterator[ServiceDescriptor]:
        return iter(list(self._descriptors.values()))

    # Options

    def configure(
        self,
        options_type: Any,
        action: Callable[[Any], Any],
        name: str = DEFAULT_OPTIONS_NAME,
    ) -> "ServiceCollection":
        """Append a configure step; steps are never deduplicated."""
        self._configure_steps.append(ConfigureOptions(options_type=options_type, name=name, action=action))
        logger.debug(
            f"Added configure step for {service_name(options_type)}"
            + (f" ({name})" if name else "")
        )
        return self

    def configure_steps(self, options_type: Any = None, name: Optional[str] = None) -> List[ConfigureOptions]:
        """Configure steps in registration order, optionally filtered."""
        return [
            step for step in self._configure_steps
            if (options_type is None or step.options_type == options_type)
            and (name is None or step.name == name)
        ]

    def get_options(self, options_type: Type[O], name: str = DEFAULT_OPTIONS_NAME) -> O:
        """Create an options instance and apply its configure steps in order."""
        options = options_type()
        for step in self.configure_steps(options_type, name):
            options = step.apply(options)
        return options
