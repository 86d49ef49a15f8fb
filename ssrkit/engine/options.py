"""
Engine and render options, and cache key resolution.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Hashable, List, Optional, Union
import importlib

from ..faults import ConfigInvalidFault


class Symbol:
    """
    Identity-compared cache key.

    Use when several engines or routes must share (or must not share) a
    compiled module regardless of which entity they bootstrap.
    """

    __slots__ = ("description",)

    def __init__(self, description: str = ""):
        self.description = description

    def __repr__(self) -> str:
        return f"Symbol({self.description!r})"


class EntityKey:
    """
    Cache key identifying a bootstrap entity by identity.

    Entities with value-based ``__eq__`` would otherwise collide.
    """

    __slots__ = ("entity",)

    def __init__(self, entity: Any):
        self.entity = entity

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, EntityKey) and other.entity is self.entity

    def __hash__(self) -> int:
        return id(self.entity)

    def __repr__(self) -> str:
        name = getattr(self.entity, "__qualname__", None) or type(self.entity).__qualname__
        return f"EntityKey({name})"


CacheKey = Union[str, Symbol, EntityKey]


@dataclass
class SetupOptions:
    """
    Per-engine defaults.

    Args:
        bootstrap: Default AppModule subclass or ModuleFactory
        providers: Providers applied to every render (lowest precedence)
        compiler_providers: Providers for the engine's default compiler
        cache_key: Default cache key (default: the bootstrap entity)
    """
    bootstrap: Any = None
    providers: List[Any] = field(default_factory=list)
    compiler_providers: List[Any] = field(default_factory=list)
    cache_key: Optional[Union[str, Symbol]] = None

    @classmethod
    def from_config(cls, config: Any, **overrides: Any) -> "SetupOptions":
        """
        Build setup options from a ConfigLoader.

        Reads ``ssr.bootstrap`` ("package.module:Attribute") and
        ``ssr.cache_key``. Keyword overrides win over configuration.

        Raises:
            ConfigInvalidFault: If the bootstrap import path cannot be loaded
        """
        bootstrap = config.get("ssr.bootstrap")
        if isinstance(bootstrap, str):
            bootstrap = import_object(bootstrap, key="ssr.bootstrap")

        values = {
            "bootstrap": bootstrap,
            "cache_key": config.get("ssr.cache_key"),
        }
        values.update(overrides)
        return cls(**values)


@dataclass
class RenderOptions:
    """
    Per-call options.

    Args:
        req: The incoming request (required; supplies the URL)
        res: The outgoing response
        bootstrap: Overrides the engine's bootstrap entity
        providers: Providers for this call (override setup providers)
        compiler_providers: Extra compiler providers; a fresh compiler is
            built for this call when set
        cache_key: Overrides the engine's cache key
    """
    req: Any
    res: Any = None
    bootstrap: Any = None
    providers: Optional[List[Any]] = None
    compiler_providers: Optional[List[Any]] = None
    cache_key: Optional[Union[str, Symbol]] = None


def resolve_cache_key(
    options: RenderOptions,
    setup: SetupOptions,
    entity: Any,
) -> Hashable:
    """Pick the cache key: call option, then setup option, then entity identity."""
    if options.cache_key is not None:
        return options.cache_key
    if setup.cache_key is not None:
        return setup.cache_key
    return EntityKey(entity)


def request_url(req: Any) -> str:
    """
    Extract the originating URL from a host request object.

    Looks at ``original_url``, then ``url``, then the same keys of a mapping.
    """
    for attr in ("original_url", "url"):
        value = getattr(req, attr, None)
        if value is not None:
            return str(value)

    if isinstance(req, dict):
        for key in ("original_url", "url"):
            if req.get(key) is not None:
                return str(req[key])

    return "/"


def import_object(path: str, key: str = "import path") -> Any:
    """Import ``"package.module:Attribute"``."""
    module_name, _, attr = path.partition(":")
    if not module_name or not attr:
        raise ConfigInvalidFault(key, f"'{path}' is not of the form 'package.module:Attribute'")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigInvalidFault(key, str(e)) from e

    try:
        obj = module
        for part in attr.split("."):
            obj = getattr(obj, part)
    except AttributeError as e:
        raise ConfigInvalidFault(key, str(e)) from e

    return obj
