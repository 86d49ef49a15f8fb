"""
Render engine core: caches, compilers and the per-request pipeline.
"""

from .document_cache import DocumentCache
from .factory_cache import BoundedFactoryCache, CacheStats, FactoryCache
from .options import (
    CacheKey,
    EntityKey,
    RenderOptions,
    SetupOptions,
    Symbol,
    request_url,
    resolve_cache_key,
)
from .compiler_context import CompilerContext
from .pipeline import RenderPipeline, request_providers, ssr_engine

__all__ = [
    "DocumentCache",
    "FactoryCache",
    "BoundedFactoryCache",
    "CacheStats",
    "CacheKey",
    "EntityKey",
    "RenderOptions",
    "SetupOptions",
    "Symbol",
    "request_url",
    "resolve_cache_key",
    "CompilerContext",
    "RenderPipeline",
    "request_providers",
    "ssr_engine",
]
