"""Claims and claims identities produced at sign-in."""

from dataclasses import dataclass, field
from typing import List, Optional


class ClaimTypes:
    """Default claim type names."""
    NAME_IDENTIFIER = "sub"
    NAME = "name"
    ROLE = "role"
    EMAIL = "email"
    AUTHENTICATION_METHOD = "amr"
    SECURITY_STAMP = "neo_identity.security_stamp"


@dataclass(frozen=True)
class Claim:
    """A single statement about the subject."""
    type: str
    value: str
    issuer: Optional[str] = None


@dataclass
class ClaimsIdentity:
    """Identity issued for one authentication type."""
    authentication_type: Optional[str] = None
    claims: List[Claim] = field(default_factory=list)
    name_claim_type: str = ClaimTypes.NAME
    role_claim_type: str = ClaimTypes.ROLE

    @property
    def is_authenticated(self) -> bool:
        return bool(self.authentication_type)

    @property
    def name(self) -> Optional[str]:
        return self.find_first_value(self.name_claim_type)

    def add_claim(self, claim: Claim) -> None:
        self.claims.append(claim)

    def add_claims(self, claims: List[Claim]) -> None:
        self.claims.extend(claims)

    def find_all(self, claim_type: str) -> List[Claim]:
        return [claim for claim in self.claims if claim.type == claim_type]

    def find_first(self, claim_type: str) -> Optional[Claim]:
        for claim in self.claims:
            if claim.type == claim_type:
                return claim
        return None

    def find_first_value(self, claim_type: str) -> Optional[str]:
        claim = self.find_first(claim_type)
        return claim.value if claim else None

    def has_claim(self, claim_type: str, value: str) -> bool:
        return any(claim.type == claim_type and claim.value == value for claim in self.claims)

    def is_in_role(self, role: str) -> bool:
        return self.has_claim(self.role_claim_type, role)
