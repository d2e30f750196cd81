"""Exceptions module for neo-identity.

This module provides the exception hierarchy for neo-identity.
"""

from .base import (
    NeoIdentityError,
    create_error_response,
)

from .domain import (
    ConfigurationError,
    ConfigBindingError,
    ServiceRegistrationError,
    StoreNotSupportedError,
    DataProtectionError,
)

__all__ = [
    "NeoIdentityError",
    "create_error_response",
    "ConfigurationError",
    "ConfigBindingError",
    "ServiceRegistrationError",
    "StoreNotSupportedError",
    "DataProtectionError",
]
