"""
Domain-specific exceptions for identity composition and services.
"""
from typing import Any, Dict, List, Optional

from .base import NeoIdentityError


# Configuration Errors
class ConfigurationError(NeoIdentityError):
    """Raised when there's a configuration issue."""
    pass


class ConfigBindingError(ConfigurationError):
    """Raised when a configuration section does not fit the target options shape."""

    def __init__(
        self,
        message: str,
        section_path: Optional[str] = None,
        target: Optional[str] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
        **kwargs
    ):
        super().__init__(message, **kwargs)
        self.section_path = section_path
        self.target = target
        self.errors = errors or []
        if section_path is not None:
            self.details["section_path"] = section_path
        if target:
            self.details["target"] = target
        if self.errors:
            self.details["errors"] = self.errors


# Registration Errors
class ServiceRegistrationError(NeoIdentityError):
    """Raised when a service registration is invalid or missing."""

    def __init__(self, message: str, service_type: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        if service_type:
            self.details["service_type"] = service_type


# Store Errors
class StoreNotSupportedError(NeoIdentityError):
    """Raised when a store lacks an optional capability a manager needs."""

    def __init__(self, capability: str, store_type: Optional[str] = None, **kwargs):
        message = f"Store does not implement {capability}"
        super().__init__(message, error_code="STORE_NOT_SUPPORTED", **kwargs)
        self.capability = capability
        self.details["capability"] = capability
        if store_type:
            self.details["store_type"] = store_type


# Data Protection Errors
class DataProtectionError(NeoIdentityError):
    """Raised when a protected payload cannot be unprotected."""

    def __init__(self, message: str = "The payload could not be unprotected", purpose: Optional[str] = None, **kwargs):
        super().__init__(message, error_code="DATA_PROTECTION_FAILED", **kwargs)
        if purpose:
            self.details["purpose"] = purpose
