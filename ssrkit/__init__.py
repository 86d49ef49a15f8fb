"""
ssrkit - compile-once server-side rendering for application modules.

An engine compiles its application module once per cache key and reuses
the compiled module for every request, injecting the request, response
and extra providers into each render.

Example:
    from ssrkit import AppModule, RenderOptions, SetupOptions, ssr_engine

    class ShopModule(AppModule):
        template = "<h1>{{ url }}</h1>"

    engine = ssr_engine(SetupOptions(bootstrap=ShopModule))

    async def handler(request):
        return await engine.render_async("dist/index.html", RenderOptions(req=request))
"""

__version__ = "0.1.0"

from .tokens import (
    InjectionToken,
    REQUEST,
    RESPONSE,
    INITIAL_CONFIG,
    RESOURCE_LOADER,
    COMPILER_OPTIONS,
)
from .di import (
    ClassProvider,
    ExistingProvider,
    FactoryProvider,
    ValueProvider,
)
from .faults import (
    Fault,
    BootstrapMissingFault,
    CompileFault,
    RenderFault,
    DocumentReadFault,
)
from .engine import (
    BoundedFactoryCache,
    CompilerContext,
    DocumentCache,
    FactoryCache,
    RenderOptions,
    RenderPipeline,
    SetupOptions,
    Symbol,
    ssr_engine,
)
from .platform import (
    AppModule,
    CompilerOptions,
    FileLoader,
    ModuleFactory,
)
from .config import ConfigLoader

__all__ = [
    # Tokens
    "InjectionToken",
    "REQUEST",
    "RESPONSE",
    "INITIAL_CONFIG",
    "RESOURCE_LOADER",
    "COMPILER_OPTIONS",

    # Providers
    "ClassProvider",
    "ExistingProvider",
    "FactoryProvider",
    "ValueProvider",

    # Faults
    "Fault",
    "BootstrapMissingFault",
    "CompileFault",
    "RenderFault",
    "DocumentReadFault",

    # Engine
    "BoundedFactoryCache",
    "CompilerContext",
    "DocumentCache",
    "FactoryCache",
    "RenderOptions",
    "RenderPipeline",
    "SetupOptions",
    "Symbol",
    "ssr_engine",

    # Platform
    "AppModule",
    "CompilerOptions",
    "FileLoader",
    "ModuleFactory",

    # Config
    "ConfigLoader",
]
