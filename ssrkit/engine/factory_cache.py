"""
Factory Cache - compile-once store of compiled modules by cache key.

Supports:
- Unbounded per-engine cache (default; entries are never evicted)
- Bounded LRU cache (opt-in extension)
- De-duplication of concurrent compiles for one key
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, Optional
import asyncio
import functools
import logging

from ..faults import CompileFault, Fault
from ..platform.module import is_module_factory


logger = logging.getLogger(__name__)


@dataclass
class CacheStats:
    """Counters for cache behaviour."""
    hits: int = 0
    misses: int = 0
    compiles: int = 0
    failures: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "hits": self.hits,
            "misses": self.misses,
            "compiles": self.compiles,
            "failures": self.failures,
        }


class FactoryCache:
    """
    Maps a cache key to the module factory compiled for it.

    For a given key at most one factory is stored, and it is never replaced.
    Entities that are already compiled bypass the cache entirely.

    The first miss for a key stores an in-flight future under that key;
    renders that miss the same key while it compiles await the same future
    instead of compiling again. A failed compile stores nothing.

    Args:
        is_compiled: Predicate telling precompiled entities apart from
            uncompiled module descriptors
    """

    def __init__(self, is_compiled: Callable[[Any], bool] = is_module_factory):
        self._is_compiled = is_compiled
        self._factories: Dict[Hashable, Any] = {}
        self._pending: Dict[Hashable, asyncio.Future] = {}
        self.stats = CacheStats()

    async def resolve(
        self,
        entity: Any,
        cache_key: Hashable,
        compiler_supplier: Callable[[], Any],
    ) -> Any:
        """
        Get the compiled factory for ``entity``.

        Args:
            entity: Uncompiled module descriptor or compiled factory
            cache_key: Key under which the compiled factory is stored
            compiler_supplier: Zero-argument callable returning the compiler
                to use on a miss; not called on a hit

        Returns:
            The compiled factory

        Raises:
            CompileFault: If compilation fails
        """
        if self._is_compiled(entity):
            return entity

        factory = self._lookup(cache_key)
        if factory is not None:
            self.stats.hits += 1
            logger.debug("Factory cache hit for %r", cache_key)
            return factory

        pending = self._pending.get(cache_key)
        if pending is not None:
            self.stats.hits += 1
            logger.debug("Awaiting in-flight compile for %r", cache_key)
            return await asyncio.shield(pending)

        self.stats.misses += 1
        logger.debug("Factory cache miss for %r", cache_key)

        task = asyncio.ensure_future(self._compile(entity, compiler_supplier))
        self._pending[cache_key] = task
        task.add_done_callback(functools.partial(self._finish, cache_key))
        return await asyncio.shield(task)

    def _finish(self, cache_key: Hashable, task: "asyncio.Future[Any]") -> None:
        self._pending.pop(cache_key, None)
        if task.cancelled():
            return
        if task.exception() is not None:
            self.stats.failures += 1
            return
        self._store(cache_key, task.result())

    async def _compile(self, entity: Any, compiler_supplier: Callable[[], Any]) -> Any:
        name = getattr(entity, "__qualname__", repr(entity))
        try:
            compiler = compiler_supplier()
            factory = await compiler.compile_async(entity)
        except Fault as e:
            logger.warning("Compile of %s failed: %s", name, e)
            raise
        except Exception as e:
            logger.warning("Compile of %s failed: %s", name, e)
            raise CompileFault(name, str(e)) from e

        self.stats.compiles += 1
        logger.info("Compiled %s", name)
        return factory

    def _lookup(self, cache_key: Hashable) -> Optional[Any]:
        return self._factories.get(cache_key)

    def _store(self, cache_key: Hashable, factory: Any) -> None:
        self._factories.setdefault(cache_key, factory)

    def get(self, cache_key: Hashable) -> Optional[Any]:
        """Return the stored factory for ``cache_key`` without compiling."""
        return self._factories.get(cache_key)

    def __contains__(self, cache_key: Hashable) -> bool:
        return cache_key in self._factories

    def __len__(self) -> int:
        return len(self._factories)


class BoundedFactoryCache(FactoryCache):
    """
    Factory cache with LRU eviction.

    Opt-in alternative for hosts that render an open-ended set of cache
    keys. An evicted key is recompiled on its next render.

    Args:
        capacity: Maximum number of compiled factories to keep
    """

    def __init__(self, capacity: int = 100, **kwargs):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        super().__init__(**kwargs)
        self.capacity = capacity
        self._access_order: list = []

    def _lookup(self, cache_key: Hashable) -> Optional[Any]:
        factory = self._factories.get(cache_key)
        if factory is not None:
            self._access_order.remove(cache_key)
            self._access_order.append(cache_key)
        return factory

    def _store(self, cache_key: Hashable, factory: Any) -> None:
        if cache_key in self._factories:
            return

        if len(self._factories) >= self.capacity and self._access_order:
            evict_key = self._access_order.pop(0)
            del self._factories[evict_key]
            logger.debug("Evicted compiled factory for %r", evict_key)

        self._factories[cache_key] = factory
        self._access_order.append(cache_key)
