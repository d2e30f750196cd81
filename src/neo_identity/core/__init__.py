"""Core building blocks shared across neo-identity."""
