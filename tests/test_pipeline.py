"""
Tests for the per-request render pipeline.
"""

import asyncio
import pytest

from ssrkit import INITIAL_CONFIG, REQUEST, RESPONSE, InjectionToken, ValueProvider
from ssrkit.engine import EntityKey, RenderOptions, SetupOptions, Symbol, ssr_engine
from ssrkit.faults import (
    BootstrapMissingFault,
    CompileFault,
    DocumentReadFault,
    RenderFault,
)
from tests.conftest import CallbackRecorder, FakeArtifact, FakeModule, resolve_from


TOKEN_A = InjectionToken("A")


class OtherModule:
    pass


# ============================================================================
# Caching Through the Pipeline
# ============================================================================


class TestCaching:

    @pytest.mark.asyncio
    async def test_renders_share_one_compile(self, make_engine, make_options, compilers, renderer):
        engine = make_engine(bootstrap=FakeModule)

        for _ in range(3):
            html = await engine.render_async("index.html", make_options())
            assert html == "<html>FakeModule</html>"

        assert compilers.compiled == [FakeModule]
        factories = [call[0] for call in renderer.calls]
        assert all(f is factories[0] for f in factories)

    @pytest.mark.asyncio
    async def test_default_key_is_entity_identity(self, make_engine, make_options, factory_cache):
        engine = make_engine(bootstrap=FakeModule)

        await engine.render_async("index.html", make_options())

        assert EntityKey(FakeModule) in factory_cache

    @pytest.mark.asyncio
    async def test_call_key_overrides_setup_key(self, make_engine, make_options, factory_cache):
        engine = make_engine(bootstrap=FakeModule, cache_key="setup")

        await engine.render_async("index.html", make_options())
        await engine.render_async("index.html", make_options(cache_key="call"))

        assert "setup" in factory_cache
        assert "call" in factory_cache
        assert factory_cache.get("setup") is not factory_cache.get("call")

    @pytest.mark.asyncio
    async def test_symbol_key(self, make_engine, make_options, factory_cache, compilers):
        key = Symbol("shop")
        engine = make_engine(bootstrap=FakeModule, cache_key=key)

        await engine.render_async("index.html", make_options())
        await engine.render_async("index.html", make_options(bootstrap=OtherModule))

        assert key in factory_cache
        assert compilers.compiled == [FakeModule]

    @pytest.mark.asyncio
    async def test_call_bootstrap_overrides_setup(self, make_engine, make_options, compilers):
        engine = make_engine(bootstrap=FakeModule)

        html = await engine.render_async("index.html", make_options(bootstrap=OtherModule))

        assert html == "<html>OtherModule</html>"
        assert compilers.compiled == [OtherModule]

    @pytest.mark.asyncio
    async def test_precompiled_bootstrap_never_cached(
        self, make_engine, make_options, factory_cache, compilers, renderer
    ):
        artifact = FakeArtifact(FakeModule)
        engine = make_engine(bootstrap=artifact, cache_key="shop")

        await engine.render_async("index.html", make_options())
        await engine.render_async("index.html", make_options(cache_key="other"))

        assert len(factory_cache) == 0
        assert compilers.compiled == []
        assert renderer.calls[0][0] is artifact

    @pytest.mark.asyncio
    async def test_concurrent_renders_compile_once(self, make_engine, make_options, compilers):
        compilers.delay = 0.01
        engine = make_engine(bootstrap=FakeModule)

        results = await asyncio.gather(*[
            engine.render_async("index.html", make_options()) for _ in range(5)
        ])

        assert len(set(results)) == 1
        assert len(compilers.compiled) == 1


# ============================================================================
# Providers
# ============================================================================


class TestProviders:

    @pytest.mark.asyncio
    async def test_call_providers_override_setup(self, make_engine, make_options, renderer):
        engine = make_engine(
            bootstrap=FakeModule,
            providers=[ValueProvider(TOKEN_A, 1)],
        )

        await engine.render_async(
            "index.html", make_options(providers=[ValueProvider(TOKEN_A, 2)])
        )

        providers = renderer.calls[0][1]
        assert await resolve_from(providers, TOKEN_A) == 2

    @pytest.mark.asyncio
    async def test_setup_providers_apply_without_call_providers(
        self, make_engine, make_options, renderer
    ):
        engine = make_engine(bootstrap=FakeModule, providers=[ValueProvider(TOKEN_A, 1)])

        await engine.render_async("index.html", make_options())

        assert await resolve_from(renderer.calls[0][1], TOKEN_A) == 1

    @pytest.mark.asyncio
    async def test_setup_providers_none(self, make_engine, make_options, renderer):
        engine = make_engine(bootstrap=FakeModule, providers=None)

        html = await engine.render_async("index.html", make_options())

        assert html == "<html>FakeModule</html>"
        assert await resolve_from(renderer.calls[0][1], TOKEN_A, optional=True) is None

    @pytest.mark.asyncio
    async def test_request_and_response_providers(
        self, make_engine, make_options, renderer, request_obj
    ):
        response = object()
        engine = make_engine(bootstrap=FakeModule)

        await engine.render_async("index.html", make_options(res=response))

        providers = renderer.calls[0][1]
        assert await resolve_from(providers, REQUEST) is request_obj
        assert await resolve_from(providers, RESPONSE) is response

    @pytest.mark.asyncio
    async def test_response_provider_absent_without_response(
        self, make_engine, make_options, renderer
    ):
        engine = make_engine(bootstrap=FakeModule)

        await engine.render_async("index.html", make_options())

        assert await resolve_from(renderer.calls[0][1], RESPONSE, optional=True) is None

    @pytest.mark.asyncio
    async def test_request_providers_override_call_providers(
        self, make_engine, make_options, renderer, request_obj
    ):
        engine = make_engine(bootstrap=FakeModule)

        await engine.render_async(
            "index.html", make_options(providers=[ValueProvider(REQUEST, "spoofed")])
        )

        assert await resolve_from(renderer.calls[0][1], REQUEST) is request_obj

    @pytest.mark.asyncio
    async def test_initial_config_is_last(self, make_engine, make_options, renderer):
        engine = make_engine(bootstrap=FakeModule)

        await engine.render_async(
            "index.html", make_options(providers=[ValueProvider(INITIAL_CONFIG, {})])
        )

        providers = renderer.calls[0][1]
        assert providers[-1].token is INITIAL_CONFIG
        config = await resolve_from(providers, INITIAL_CONFIG)
        assert config == {
            "document": "<html><body><app-root></app-root></body></html>",
            "url": "/shop?page=2",
        }

    @pytest.mark.asyncio
    async def test_call_compiler_providers_build_fresh_compiler(
        self, make_engine, make_options, compilers
    ):
        engine = make_engine(bootstrap=FakeModule)
        extra = [ValueProvider(TOKEN_A, "compiler")]

        await engine.render_async("index.html", make_options(compiler_providers=extra))

        assert compilers.extra_compilers == [extra]

    @pytest.mark.asyncio
    async def test_compiler_not_built_on_cache_hit(self, make_engine, make_options, compilers):
        engine = make_engine(bootstrap=FakeModule)
        extra = [ValueProvider(TOKEN_A, "compiler")]

        await engine.render_async("index.html", make_options(compiler_providers=extra))
        await engine.render_async("index.html", make_options(compiler_providers=extra))

        assert len(compilers.extra_compilers) == 1


# ============================================================================
# Documents
# ============================================================================


class TestDocuments:

    @pytest.mark.asyncio
    async def test_document_read_once_across_renders(
        self, make_engine, make_options, reader, renderer
    ):
        engine = make_engine(bootstrap=FakeModule)

        await engine.render_async("index.html", make_options())
        await engine.render_async("index.html", make_options())

        assert reader.count("index.html") == 1
        first = await resolve_from(renderer.calls[0][1], INITIAL_CONFIG)
        second = await resolve_from(renderer.calls[1][1], INITIAL_CONFIG)
        assert first["document"] == second["document"]

    @pytest.mark.asyncio
    async def test_each_path_read_separately(self, make_engine, make_options, reader):
        engine = make_engine(bootstrap=FakeModule)

        await engine.render_async("index.html", make_options())
        await engine.render_async("other.html", make_options())

        assert reader.reads == ["index.html", "other.html"]


# ============================================================================
# Callback Contract
# ============================================================================


class TestCallback:

    @pytest.mark.asyncio
    async def test_success_delivers_html(self, make_engine, make_options, callback):
        engine = make_engine(bootstrap=FakeModule)

        task = engine.render("index.html", make_options(), callback)
        await task

        assert callback.calls == [(None, "<html>FakeModule</html>")]

    @pytest.mark.asyncio
    async def test_engine_is_callable(self, make_engine, make_options, callback):
        engine = make_engine(bootstrap=FakeModule)

        await engine("index.html", make_options(), callback)

        assert callback.html == "<html>FakeModule</html>"

    @pytest.mark.asyncio
    async def test_missing_bootstrap_fails_synchronously(
        self, make_engine, make_options, callback, reader, factory_cache
    ):
        engine = make_engine()

        task = engine.render("index.html", make_options(), callback)

        assert task is None
        assert len(callback.calls) == 1
        assert isinstance(callback.error, BootstrapMissingFault)
        assert callback.html is None
        assert reader.reads == []
        assert len(factory_cache) == 0

    @pytest.mark.asyncio
    async def test_missing_bootstrap_raises_from_render_async(self, make_engine, make_options):
        engine = make_engine()

        with pytest.raises(BootstrapMissingFault):
            await engine.render_async("index.html", make_options())

    @pytest.mark.asyncio
    async def test_compile_error_delivered_once(
        self, make_engine, make_options, callback, compilers, factory_cache
    ):
        compilers.fail = RuntimeError("syntax error")
        engine = make_engine(bootstrap=FakeModule)

        await engine.render("index.html", make_options(), callback)

        assert len(callback.calls) == 1
        assert isinstance(callback.error, CompileFault)
        assert callback.html is None
        assert len(factory_cache) == 0

    @pytest.mark.asyncio
    async def test_render_error_delivered_once(self, make_engine, make_options, callback, renderer):
        renderer.fail = LookupError("no provider for Catalog")
        engine = make_engine(bootstrap=FakeModule)

        await engine.render("index.html", make_options(), callback)

        assert len(callback.calls) == 1
        assert isinstance(callback.error, RenderFault)
        assert isinstance(callback.error.__cause__, LookupError)
        assert callback.html is None

    @pytest.mark.asyncio
    async def test_read_error_delivered_once(self, make_engine, make_options, callback, reader):
        engine = make_engine(bootstrap=FakeModule)

        await engine.render("missing.html", make_options(), callback)

        assert len(callback.calls) == 1
        assert isinstance(callback.error, DocumentReadFault)
        assert callback.html is None

        # Not cached: the next render reads again
        second = CallbackRecorder()
        await engine.render("missing.html", make_options(), second)
        assert reader.count("missing.html") == 2

    @pytest.mark.asyncio
    async def test_compile_error_retried_by_next_render(
        self, make_engine, make_options, compilers
    ):
        compilers.fail = RuntimeError("syntax error")
        engine = make_engine(bootstrap=FakeModule)
        first, second = CallbackRecorder(), CallbackRecorder()

        await engine.render("index.html", make_options(), first)
        compilers.fail = None
        await engine.render("index.html", make_options(), second)

        assert isinstance(first.error, CompileFault)
        assert second.calls == [(None, "<html>FakeModule</html>")]
        assert len(compilers.compiled) == 2

    @pytest.mark.asyncio
    async def test_cancelled_render_does_not_cancel_concurrent_render(
        self, make_engine, make_options, compilers, factory_cache
    ):
        compilers.delay = 0.05
        engine = make_engine(bootstrap=FakeModule)
        first, second = CallbackRecorder(), CallbackRecorder()

        t1 = engine.render("index.html", make_options(), first)
        await asyncio.sleep(0.01)
        t2 = engine.render("index.html", make_options(), second)
        await asyncio.sleep(0.01)
        t1.cancel()

        await asyncio.gather(t1, t2, return_exceptions=True)

        assert second.calls == [(None, "<html>FakeModule</html>")]
        assert first.calls == []
        assert len(compilers.compiled) == 1
        assert len(factory_cache) == 1

    @pytest.mark.asyncio
    async def test_task_held_until_complete(self, make_engine, make_options, callback):
        engine = make_engine(bootstrap=FakeModule)

        task = engine.render("index.html", make_options(), callback)
        assert task in engine._tasks

        await task
        await asyncio.sleep(0)

        assert task not in engine._tasks
        assert callback.html == "<html>FakeModule</html>"

    def test_no_running_loop_reported_through_callback(self, make_engine, make_options, callback):
        engine = make_engine(bootstrap=FakeModule)

        task = engine.render("index.html", make_options(), callback)

        assert task is None
        assert len(callback.calls) == 1
        assert isinstance(callback.error, RuntimeError)


def test_ssr_engine_builds_pipeline_with_own_caches():
    first = ssr_engine(SetupOptions(bootstrap=FakeModule))
    second = ssr_engine(SetupOptions(bootstrap=FakeModule))

    assert first.factory_cache is not second.factory_cache
    assert first.documents is not second.documents
    assert first.compilers.default is not second.compilers.default


def test_render_options_require_request():
    with pytest.raises(TypeError):
        RenderOptions()
