"""Lookup key normalization."""

from typing import Optional


class UpperInvariantLookupNormalizer:
    """Normalizes keys to upper case so lookups are case-insensitive."""

    def normalize(self, key: Optional[str]) -> Optional[str]:
        if key is None:
            return None
        return key.upper()
