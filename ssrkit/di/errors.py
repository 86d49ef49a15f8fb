"""
DI-specific error types with rich diagnostics.
"""

from typing import Any, List, Optional


class DIError(Exception):
    """Base exception for DI errors."""
    pass


class ProviderNotFoundError(DIError):
    """Provider not found for requested token."""

    def __init__(
        self,
        token: Any,
        requested_by: Optional[Any] = None,
    ):
        self.token = token
        self.requested_by = requested_by

        msg = f"No provider found for token={token!r}"
        if requested_by is not None:
            msg += f"\nRequested by: {requested_by!r}"
        msg += "\n\nSuggested fixes:"
        msg += f"\n  - Register a provider for {token!r} in the module, setup or call providers"

        super().__init__(msg)


class DependencyCycleError(DIError):
    """Circular dependency detected."""

    def __init__(self, cycle: List[Any]):
        self.cycle = cycle

        msg = "Detected dependency cycle:"
        for i, token in enumerate(cycle):
            arrow = " -> " if i < len(cycle) - 1 else ""
            msg += f"\n  {token!r}{arrow}"

        super().__init__(msg)


class InvalidProviderError(DIError):
    """An entry in a provider list is not a provider."""

    def __init__(self, entry: Any):
        self.entry = entry
        super().__init__(
            f"Invalid provider entry {entry!r}: expected ValueProvider, "
            f"ClassProvider, FactoryProvider or ExistingProvider"
        )
