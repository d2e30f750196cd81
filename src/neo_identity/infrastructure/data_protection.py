"""Data protection for identity payloads.

Uses Fernet symmetric encryption. Each purpose gets its own key, derived
with PBKDF2 from the root key, so a payload protected for one purpose
cannot be unprotected by a protector for another.
"""

import base64
import logging
from typing import Dict, Optional, Union

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from pydantic import BaseModel, ConfigDict, Field, SecretStr

from ..config.settings import get_identity_settings
from ..config.source import ConfigurationSection
from ..core.exceptions import ConfigurationError, DataProtectionError
from ..dependency_injection import ServiceCollection, ServiceDescriber

logger = logging.getLogger(__name__)

DATA_PROTECTION_SECTION = "data_protection"


class DataProtectionOptions(BaseModel):
    """Data protection settings."""
    model_config = ConfigDict(validate_assignment=True, extra="ignore")

    application_discriminator: str = "neo-identity"
    key: Optional[SecretStr] = None
    iterations: int = Field(default=100000, ge=1)


class DataProtector:
    """Protects and unprotects payloads for a single purpose."""

    def __init__(self, cipher: Fernet, purpose: str):
        self._cipher = cipher
        self.purpose = purpose

    def protect(self, data: Union[str, bytes]) -> str:
        if isinstance(data, str):
            data = data.encode("utf-8")
        return self._cipher.encrypt(data).decode("ascii")

    def unprotect(self, protected: str, ttl: Optional[int] = None) -> bytes:
        """Decrypt a payload; ``ttl`` rejects payloads older than that many seconds."""
        try:
            return self._cipher.decrypt(protected.encode("ascii"), ttl=ttl)
        except (InvalidToken, UnicodeEncodeError) as e:
            logger.warning(f"Failed to unprotect payload for purpose '{self.purpose}'")
            raise DataProtectionError(purpose=self.purpose) from e

    def unprotect_str(self, protected: str, ttl: Optional[int] = None) -> str:
        return self.unprotect(protected, ttl=ttl).decode("utf-8")


class DataProtectionProvider:
    """Creates purpose-bound protectors from a single root key."""

    def __init__(self, options: Optional[DataProtectionOptions] = None):
        self.options = options or DataProtectionOptions()

        key = self.options.key or get_identity_settings().data_protection_key
        if key is None or not key.get_secret_value():
            raise ConfigurationError(
                "Data protection key not configured; set NEO_IDENTITY_DATA_PROTECTION_KEY "
                "or the data_protection:key configuration value"
            )
        self._key = key.get_secret_value().encode("utf-8")
        self._protectors: Dict[str, DataProtector] = {}

    def create_protector(self, purpose: str, *sub_purposes: str) -> DataProtector:
        full_purpose = ".".join((purpose,) + sub_purposes)
        protector = self._protectors.get(full_purpose)
        if protector is None:
            protector = DataProtector(self._cipher_for(full_purpose), full_purpose)
            self._protectors[full_purpose] = protector
        return protector

    def _cipher_for(self, purpose: str) -> Fernet:
        salt = f"{self.options.application_discriminator}:{purpose}".encode("utf-8")
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=32,
            salt=salt,
            iterations=self.options.iterations,
        )
        derived_key = base64.urlsafe_b64encode(kdf.derive(self._key))
        return Fernet(derived_key)


def add_data_protection(
    services: ServiceCollection,
    configuration: Optional[ConfigurationSection] = None,
) -> ServiceCollection:
    """Register the data protection provider and bind its options.

    The options are read from the ``data_protection`` sub-section of the
    given configuration.
    """
    if configuration is not None:
        section = configuration.get_section(DATA_PROTECTION_SECTION)
        section.bind(DataProtectionOptions)
        services.configure(DataProtectionOptions, section.binder(DataProtectionOptions))

    services.try_add(ServiceDescriber(configuration).singleton(DataProtectionProvider))
    return services
