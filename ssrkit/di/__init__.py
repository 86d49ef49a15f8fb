"""
Minimal dependency injection for compiled modules.

Provider entries are (token, value) bindings; a Container resolves them with
last-wins precedence so later provider lists override earlier ones.
"""

from .core import Container, Provider, ResolveCtx
from .providers import ClassProvider, ExistingProvider, FactoryProvider, ValueProvider
from .errors import DIError, DependencyCycleError, InvalidProviderError, ProviderNotFoundError

__all__ = [
    "Container",
    "Provider",
    "ResolveCtx",
    "ClassProvider",
    "ExistingProvider",
    "FactoryProvider",
    "ValueProvider",
    "DIError",
    "DependencyCycleError",
    "InvalidProviderError",
    "ProviderNotFoundError",
]
