"""Infrastructure services used alongside identity."""

from .data_protection import (
    DataProtectionOptions,
    DataProtector,
    DataProtectionProvider,
    add_data_protection,
)

__all__ = [
    "DataProtectionOptions",
    "DataProtector",
    "DataProtectionProvider",
    "add_data_protection",
]
