"""
Core DI types and protocols.

Defines the fundamental contracts for the DI system used by the
compiler and renderer.
"""

from typing import (
    Any,
    Dict,
    Iterable,
    List,
    Optional,
    Protocol,
    runtime_checkable,
)

from .errors import DependencyCycleError, InvalidProviderError, ProviderNotFoundError


class ResolveCtx:
    """
    Context for resolution operations.

    Tracks resolution stack for cycle detection and diagnostics.
    """
    __slots__ = ("container", "stack")

    def __init__(self, container: "Container"):
        self.container = container
        self.stack: List[Any] = []

    def push(self, token: Any) -> None:
        if token in self.stack:
            raise DependencyCycleError(self.stack + [token])
        self.stack.append(token)

    def pop(self) -> None:
        self.stack.pop()


@runtime_checkable
class Provider(Protocol):
    """
    Provider protocol - a (token, value) injection entry.

    ``instantiate`` produces the value bound to ``token``.
    """

    @property
    def token(self) -> Any:
        ...

    async def instantiate(self, ctx: ResolveCtx) -> Any:
        ...


class Container:
    """
    DI Container - resolves tokens against an ordered provider list.

    Registering a provider for a token that is already registered replaces
    it, so for a list of entries the last one holding a token wins.
    Resolved values are cached for the lifetime of the container.

    Example:
        container = Container.from_providers([
            ValueProvider(REQUEST, request),
            ClassProvider(Greeter, Greeter),
        ])
        greeter = await container.resolve_async(Greeter)
    """

    __slots__ = ("_providers", "_cache", "_parent")

    def __init__(self, parent: Optional["Container"] = None):
        self._providers: Dict[Any, Provider] = {}
        self._cache: Dict[Any, Any] = {}
        self._parent = parent

    @classmethod
    def from_providers(
        cls,
        providers: Iterable[Any],
        parent: Optional["Container"] = None,
    ) -> "Container":
        """Build a container from provider entries in precedence order."""
        container = cls(parent=parent)
        for provider in providers:
            container.register(provider)
        return container

    def register(self, provider: Provider) -> None:
        """
        Register a provider, overriding any earlier one for the same token.

        Raises:
            InvalidProviderError: If ``provider`` is not a provider
        """
        if not isinstance(provider, Provider):
            raise InvalidProviderError(provider)
        self._providers[provider.token] = provider
        self._cache.pop(provider.token, None)

    def is_registered(self, token: Any) -> bool:
        return self._lookup_provider(token) is not None

    async def resolve_async(
        self,
        token: Any,
        *,
        optional: bool = False,
        ctx: Optional[ResolveCtx] = None,
    ) -> Any:
        """
        Resolve a token to its value.

        Args:
            token: InjectionToken, class or string key
            optional: If True, return None if not found instead of raising
            ctx: Resolution context of the dependent being built

        Raises:
            ProviderNotFoundError: If provider not found and not optional
            DependencyCycleError: If the token depends on itself
        """
        if token in self._cache:
            return self._cache[token]

        provider = self._providers.get(token)
        if provider is None:
            if self._parent is not None and self._parent.is_registered(token):
                return await self._parent.resolve_async(token, optional=optional, ctx=ctx)
            if optional:
                return None
            requested_by = ctx.stack[-1] if ctx and ctx.stack else None
            raise ProviderNotFoundError(token, requested_by=requested_by)

        ctx = ctx or ResolveCtx(self)
        ctx.push(token)
        try:
            instance = await provider.instantiate(ctx)
        finally:
            ctx.pop()

        self._cache[token] = instance
        return instance

    def _lookup_provider(self, token: Any) -> Optional[Provider]:
        if token in self._providers:
            return self._providers[token]
        if self._parent is not None:
            return self._parent._lookup_provider(token)
        return None
