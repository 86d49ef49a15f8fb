"""
Shared test fixtures and helpers for the ssrkit test suite.
"""

import asyncio
import pytest
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

from ssrkit.di import Container
from ssrkit.engine import (
    DocumentCache,
    FactoryCache,
    RenderOptions,
    RenderPipeline,
    SetupOptions,
)


# ============================================================================
# Collaborator Stand-ins
# ============================================================================


class CountingReader:
    """Storage stand-in that counts reads per path."""

    def __init__(self, documents: Optional[Dict[str, str]] = None):
        self.documents = documents or {}
        self.reads: List[str] = []

    def __call__(self, path: str, encoding: str) -> str:
        self.reads.append(path)
        if path not in self.documents:
            raise FileNotFoundError(f"No such file: {path}")
        return self.documents[path]

    def count(self, path: str) -> int:
        return self.reads.count(path)


class FakeModule:
    """Uncompiled bootstrap entity."""


class FakeArtifact:
    """Compiled bootstrap entity."""

    def __init__(self, entity: Any):
        self.entity = entity
        self.name = getattr(entity, "__name__", repr(entity))


class FakeCompiler:
    def __init__(self, context: "FakeCompilerContext"):
        self.context = context

    async def compile_async(self, entity: Any) -> FakeArtifact:
        self.context.compiled.append(entity)
        # Suspend so concurrent renders interleave
        await asyncio.sleep(self.context.delay)
        if self.context.fail is not None:
            raise self.context.fail
        return FakeArtifact(entity)


class FakeCompilerContext:
    """CompilerContext stand-in recording compiles and fresh compilers."""

    def __init__(self):
        self.compiled: List[Any] = []
        self.extra_compilers: List[list] = []
        self.fail: Optional[BaseException] = None
        self.delay = 0
        self.default = FakeCompiler(self)

    def supplier_for(self, call_compiler_providers=None):
        if call_compiler_providers is not None:
            def supply():
                self.extra_compilers.append(list(call_compiler_providers))
                return FakeCompiler(self)
            return supply
        return lambda: self.default


class FakeRenderer:
    """Renderer stand-in recording its inputs."""

    def __init__(self):
        self.calls: List[tuple] = []
        self.fail: Optional[BaseException] = None

    async def render(self, factory: Any, providers: List[Any]) -> str:
        self.calls.append((factory, providers))
        await asyncio.sleep(0)
        if self.fail is not None:
            raise self.fail
        return f"<html>{factory.name}</html>"


class CallbackRecorder:
    """Render callback recording every delivery."""

    def __init__(self):
        self.calls: List[tuple] = []

    def __call__(self, error, html=None):
        self.calls.append((error, html))

    @property
    def error(self):
        return self.calls[0][0]

    @property
    def html(self):
        return self.calls[0][1]


def is_fake_artifact(entity: Any) -> bool:
    return isinstance(entity, FakeArtifact)


async def resolve_from(providers: List[Any], token: Any, optional: bool = False) -> Any:
    """Resolve a token the way the renderer sees the provider list."""
    container = Container.from_providers(providers)
    return await container.resolve_async(token, optional=optional)


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def reader():
    return CountingReader({
        "index.html": "<html><body><app-root></app-root></body></html>",
        "other.html": "<html><body><app-root>loading</app-root></body></html>",
    })


@pytest.fixture
def documents(reader):
    return DocumentCache(reader=reader)


@pytest.fixture
def factory_cache():
    return FactoryCache(is_compiled=is_fake_artifact)


@pytest.fixture
def compilers():
    return FakeCompilerContext()


@pytest.fixture
def renderer():
    return FakeRenderer()


@pytest.fixture
def make_engine(documents, factory_cache, compilers, renderer):
    """Build a pipeline wired to the stand-in collaborators."""

    def _make(**setup_kwargs) -> RenderPipeline:
        return RenderPipeline(
            SetupOptions(**setup_kwargs),
            factory_cache=factory_cache,
            documents=documents,
            renderer=renderer,
            compiler_context=compilers,
        )

    return _make


@pytest.fixture
def request_obj():
    return SimpleNamespace(original_url="/shop?page=2")


@pytest.fixture
def make_options(request_obj):
    def _make(**kwargs) -> RenderOptions:
        kwargs.setdefault("req", request_obj)
        return RenderOptions(**kwargs)

    return _make


@pytest.fixture
def callback():
    return CallbackRecorder()
