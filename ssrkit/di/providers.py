"""
Provider implementations for different instantiation strategies.

Each provider binds one token. ``deps`` lists the tokens injected
positionally; when omitted, parameter annotations are used as tokens.
"""

from typing import Any, Callable, Dict, Optional, Sequence
import inspect

from .core import ResolveCtx
from .errors import DIError


def _extract_dependencies(func: Callable, owner: str) -> Dict[str, Dict[str, Any]]:
    """
    Extract dependencies from a callable signature.

    Returns:
        Dict mapping parameter names to dependency info
    """
    deps: Dict[str, Dict[str, Any]] = {}

    try:
        sig = inspect.signature(func)
    except ValueError:
        return deps

    try:
        type_hints = inspect.get_annotations(func, eval_str=True)
    except Exception:
        type_hints = {}

    for param_name, param in sig.parameters.items():
        if param_name in ("self", "cls"):
            continue

        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue

        annotation = type_hints.get(param_name, param.annotation)

        if annotation is inspect.Parameter.empty:
            # Defaulted parameters are left to their default
            if param.default is not inspect.Parameter.empty:
                continue
            raise DIError(
                f"Missing type annotation for parameter '{param_name}' in {owner}"
            )

        deps[param_name] = {
            "token": annotation,
            "optional": param.default is not inspect.Parameter.empty,
        }

    return deps


async def _resolve_deps(
    ctx: ResolveCtx,
    deps: Optional[Sequence[Any]],
    annotated: Dict[str, Dict[str, Any]],
) -> tuple[list, dict]:
    if deps is not None:
        args = [await ctx.container.resolve_async(token, ctx=ctx) for token in deps]
        return args, {}

    kwargs = {}
    for name, info in annotated.items():
        value = await ctx.container.resolve_async(
            info["token"], optional=info["optional"], ctx=ctx
        )
        if value is None and info["optional"]:
            continue
        kwargs[name] = value
    return [], kwargs


class ValueProvider:
    """Provider that returns a pre-bound constant value."""

    __slots__ = ("token", "_value")

    def __init__(self, token: Any, value: Any):
        self.token = token
        self._value = value

    @property
    def value(self) -> Any:
        return self._value

    async def instantiate(self, ctx: ResolveCtx) -> Any:
        return self._value

    def __repr__(self) -> str:
        return f"ValueProvider({self.token!r})"


class ClassProvider:
    """
    Provider that instantiates a class by resolving constructor dependencies.

    Supports async initialisation via the async_init() convention.
    """

    __slots__ = ("token", "_cls", "_deps", "_annotated", "_has_async_init")

    def __init__(self, token: Any, cls: type, deps: Optional[Sequence[Any]] = None):
        self.token = token
        self._cls = cls
        self._deps = list(deps) if deps is not None else None
        self._has_async_init = hasattr(cls, "async_init")

        if self._deps is None and cls.__init__ is not object.__init__:
            self._annotated = _extract_dependencies(cls.__init__, f"{cls.__qualname__}.__init__")
        else:
            self._annotated = {}

    async def instantiate(self, ctx: ResolveCtx) -> Any:
        args, kwargs = await _resolve_deps(ctx, self._deps, self._annotated)
        instance = self._cls(*args, **kwargs)

        if self._has_async_init:
            await instance.async_init()

        return instance

    def __repr__(self) -> str:
        return f"ClassProvider({self.token!r}, {self._cls.__qualname__})"


class FactoryProvider:
    """
    Provider that calls a factory function to produce the value.

    Supports both sync and async factories.
    """

    __slots__ = ("token", "_factory", "_deps", "_annotated", "_is_async")

    def __init__(self, token: Any, factory: Callable, deps: Optional[Sequence[Any]] = None):
        self.token = token
        self._factory = factory
        self._deps = list(deps) if deps is not None else None
        self._is_async = inspect.iscoroutinefunction(factory)
        self._annotated = (
            {} if self._deps is not None
            else _extract_dependencies(factory, getattr(factory, "__qualname__", repr(factory)))
        )

    async def instantiate(self, ctx: ResolveCtx) -> Any:
        args, kwargs = await _resolve_deps(ctx, self._deps, self._annotated)
        if self._is_async:
            return await self._factory(*args, **kwargs)
        return self._factory(*args, **kwargs)

    def __repr__(self) -> str:
        return f"FactoryProvider({self.token!r})"


class ExistingProvider:
    """Provider that aliases another token."""

    __slots__ = ("token", "_existing")

    def __init__(self, token: Any, existing: Any):
        self.token = token
        self._existing = existing

    async def instantiate(self, ctx: ResolveCtx) -> Any:
        return await ctx.container.resolve_async(self._existing, ctx=ctx)

    def __repr__(self) -> str:
        return f"ExistingProvider({self.token!r} -> {self._existing!r})"
