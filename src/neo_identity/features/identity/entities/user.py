"""Default user and role entities."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from uuid import uuid4


def _new_id() -> str:
    return str(uuid4())


@dataclass
class IdentityUser:
    """Default user entity used when no custom user type is supplied."""
    user_name: Optional[str] = None
    id: str = field(default_factory=_new_id)
    normalized_user_name: Optional[str] = None
    email: Optional[str] = None
    normalized_email: Optional[str] = None
    email_confirmed: bool = False
    password_hash: Optional[str] = None
    security_stamp: Optional[str] = None
    phone_number: Optional[str] = None
    phone_number_confirmed: bool = False
    two_factor_enabled: bool = False
    lockout_end: Optional[datetime] = None
    lockout_enabled: bool = False
    access_failed_count: int = 0

    def __str__(self) -> str:
        return self.user_name or self.id


@dataclass
class IdentityRole:
    """Default role entity used when no custom role type is supplied."""
    name: Optional[str] = None
    id: str = field(default_factory=_new_id)
    normalized_name: Optional[str] = None

    def __str__(self) -> str:
        return self.name or self.id
