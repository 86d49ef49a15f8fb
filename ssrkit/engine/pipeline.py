"""
Render Pipeline - per-request server-side rendering of a compiled module.

Flow for one render call:
1. Resolve the bootstrap entity (call option, then setup option)
2. Resolve the cache key (call option, then setup option, then entity)
3. Read the document and assemble providers in precedence order
4. Pick the compiler supplier (default, or fresh for call compiler providers)
5. Get the compiled module from the factory cache (compiling on a miss)
6. Render the module into the document

The outward contract is callback based: every call reports exactly one
outcome, ``callback(None, html)`` or ``callback(error, None)``.
"""

from typing import Any, Callable, List, Optional, Protocol, Set
import asyncio
import logging

from ..di import ValueProvider
from ..faults import BootstrapMissingFault, Fault, RenderFault
from ..platform.renderer import ModuleRenderer
from ..tokens import INITIAL_CONFIG, REQUEST, RESPONSE
from .compiler_context import CompilerContext
from .document_cache import DocumentCache
from .factory_cache import BoundedFactoryCache, FactoryCache
from .options import RenderOptions, SetupOptions, request_url, resolve_cache_key


logger = logging.getLogger(__name__)


RenderCallback = Callable[[Optional[BaseException], Optional[str]], Any]


class Renderer(Protocol):
    """Turns a compiled module plus providers into HTML."""

    async def render(self, factory: Any, providers: List[Any]) -> str:
        ...


def request_providers(req: Any, res: Any = None) -> List[Any]:
    """Providers binding the request and, when present, the response."""
    providers = [ValueProvider(REQUEST, req)]
    if res is not None:
        providers.append(ValueProvider(RESPONSE, res))
    return providers


class RenderPipeline:
    """
    Server-side render engine for one application.

    The engine owns its caches: compiled modules are shared by all renders
    of a cache key and documents are read once per path, for as long as the
    engine lives. Build one engine per application at startup.

    Args:
        setup: Engine defaults
        factory_cache: Compiled module cache (default: unbounded)
        documents: Document cache (default: file system reads)
        renderer: Renderer collaborator (default: ModuleRenderer)
        compiler_context: Compiler source (default: built from ``setup``)

    Example:
        engine = ssr_engine(SetupOptions(bootstrap=ShopModule))

        async def handler(request):
            html = await engine.render_async("dist/index.html", RenderOptions(req=request))
    """

    def __init__(
        self,
        setup: SetupOptions,
        *,
        factory_cache: Optional[FactoryCache] = None,
        documents: Optional[DocumentCache] = None,
        renderer: Optional[Renderer] = None,
        compiler_context: Optional[CompilerContext] = None,
    ):
        self.setup = setup
        self.factory_cache = factory_cache if factory_cache is not None else FactoryCache()
        self.documents = documents if documents is not None else DocumentCache()
        self.renderer = renderer or ModuleRenderer()
        self.compilers = compiler_context or CompilerContext(
            self.documents,
            setup_compiler_providers=setup.compiler_providers,
        )
        # In-flight callback renders, held until they complete
        self._tasks: Set[asyncio.Task] = set()

    @classmethod
    def from_config(cls, config: Any, **kwargs: Any) -> "RenderPipeline":
        """
        Build an engine from a ConfigLoader.

        Reads ``ssr.bootstrap``, ``ssr.cache_key``, ``ssr.cache.capacity``
        (enables the bounded cache) and ``ssr.document_encoding``.
        """
        setup = SetupOptions.from_config(config)

        capacity = config.get("ssr.cache.capacity")
        if capacity and "factory_cache" not in kwargs:
            kwargs["factory_cache"] = BoundedFactoryCache(capacity=int(capacity))

        encoding = config.get("ssr.document_encoding")
        if encoding and "documents" not in kwargs:
            kwargs["documents"] = DocumentCache(encoding=encoding)

        return cls(setup, **kwargs)

    # ------------------------------------------------------------------
    # Callback interface
    # ------------------------------------------------------------------

    def render(
        self,
        path: str,
        options: RenderOptions,
        callback: RenderCallback,
    ) -> Optional[asyncio.Task]:
        """
        Render ``path`` and report the outcome through ``callback``.

        Never raises. A missing bootstrap entity is reported before this
        method returns; everything else is reported when the returned task
        completes. Must be called with an event loop running.

        Returns:
            The task performing the render, or None if the call failed
            before a task could be scheduled
        """
        try:
            entity = self._resolve_entity(path, options)
            task = asyncio.get_running_loop().create_task(
                self._run(path, options, entity, callback)
            )
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
        except Exception as e:
            callback(e, None)
            return None
        return task

    __call__ = render

    async def _run(
        self,
        path: str,
        options: RenderOptions,
        entity: Any,
        callback: RenderCallback,
    ) -> None:
        try:
            html = await self._render_entity(path, options, entity)
        except Exception as e:
            callback(e, None)
        else:
            callback(None, html)

    # ------------------------------------------------------------------
    # Awaitable interface
    # ------------------------------------------------------------------

    async def render_async(self, path: str, options: RenderOptions) -> str:
        """
        Render ``path`` and return the HTML.

        Raises:
            BootstrapMissingFault: If no bootstrap entity is configured
            DocumentReadFault: If the document cannot be read
            CompileFault: If the module fails to compile
            RenderFault: If rendering fails
        """
        entity = self._resolve_entity(path, options)
        return await self._render_entity(path, options, entity)

    def _resolve_entity(self, path: str, options: RenderOptions) -> Any:
        entity = options.bootstrap if options.bootstrap is not None else self.setup.bootstrap
        if entity is None:
            raise BootstrapMissingFault(path)
        return entity

    async def _render_entity(self, path: str, options: RenderOptions, entity: Any) -> str:
        cache_key = resolve_cache_key(options, self.setup, entity)

        document = await self.documents.get(path)
        providers = self.build_providers(options, document)

        compiler_supplier = self.compilers.supplier_for(options.compiler_providers)

        factory = await self.factory_cache.resolve(
            entity,
            cache_key=cache_key,
            compiler_supplier=compiler_supplier,
        )

        try:
            html = await self.renderer.render(factory, providers)
        except Fault:
            raise
        except Exception as e:
            name = getattr(factory, "name", repr(factory))
            raise RenderFault(name, str(e)) from e

        logger.debug("Rendered %s for %s", path, request_url(options.req))
        return html

    def build_providers(self, options: RenderOptions, document: str) -> List[Any]:
        """
        Assemble the providers for one render, lowest precedence first:
        setup providers, call providers, request/response, initial config.
        """
        return [
            *(self.setup.providers or ()),
            *(options.providers or ()),
            *request_providers(options.req, options.res),
            ValueProvider(INITIAL_CONFIG, {
                "document": document,
                "url": request_url(options.req),
            }),
        ]


def ssr_engine(setup: SetupOptions, **kwargs: Any) -> RenderPipeline:
    """Create a render engine; the returned object is the render callable."""
    return RenderPipeline(setup, **kwargs)
