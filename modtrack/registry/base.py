"""Shared registry errors."""


class RegistryFrozenError(RuntimeError):
    """Raised when a plugin registers after the registration phase has ended."""
