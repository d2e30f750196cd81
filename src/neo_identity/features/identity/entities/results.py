"""Operation outcomes returned by identity services.

Validation and business failures are reported as values rather than
raised, so callers can show every problem at once.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List


@dataclass(frozen=True)
class IdentityError:
    """A single identity failure with a stable code."""
    code: str
    description: str


@dataclass(frozen=True)
class IdentityResult:
    """Outcome of an identity operation."""
    succeeded: bool
    errors: List[IdentityError] = field(default_factory=list)

    @classmethod
    def success(cls) -> "IdentityResult":
        return cls(succeeded=True)

    @classmethod
    def failed(cls, *errors: IdentityError) -> "IdentityResult":
        return cls(succeeded=False, errors=list(errors))

    def __str__(self) -> str:
        if self.succeeded:
            return "Succeeded"
        return "Failed : " + ",".join(error.code for error in self.errors)


class PasswordVerificationResult(Enum):
    """Outcome of verifying a password against a stored hash."""
    FAILED = "failed"
    SUCCESS = "success"
    SUCCESS_REHASH_NEEDED = "success_rehash_needed"


@dataclass(frozen=True)
class SignInResult:
    """Outcome of a sign-in attempt."""
    succeeded: bool = False
    is_locked_out: bool = False
    is_not_allowed: bool = False
    requires_two_factor: bool = False

    @classmethod
    def success(cls) -> "SignInResult":
        return cls(succeeded=True)

    @classmethod
    def failed(cls) -> "SignInResult":
        return cls()

    @classmethod
    def locked_out(cls) -> "SignInResult":
        return cls(is_locked_out=True)

    @classmethod
    def not_allowed(cls) -> "SignInResult":
        return cls(is_not_allowed=True)

    @classmethod
    def two_factor_required(cls) -> "SignInResult":
        return cls(requires_two_factor=True)

    def __str__(self) -> str:
        if self.is_locked_out:
            return "Lockedout"
        if self.is_not_allowed:
            return "NotAllowed"
        if self.requires_two_factor:
            return "RequiresTwoFactor"
        return "Succeeded" if self.succeeded else "Failed"
