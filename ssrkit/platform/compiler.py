"""
Module Compiler - turns AppModule descriptors into ModuleFactory artifacts.

Provides:
- CompilerOptions for the Jinja2 environment (sandbox, autoescape, filters)
- Compiler: async compilation against a provider-configured environment
- CompilerFactory: builds compilers from compiler-level provider lists
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, Optional, Sequence
import asyncio
import logging

from jinja2 import Environment, TemplateError, select_autoescape
from jinja2.sandbox import SandboxedEnvironment

from ..di import Container
from ..faults import CompileFault
from ..tokens import COMPILER_OPTIONS, RESOURCE_LOADER
from .module import ModuleFactory, is_app_module


logger = logging.getLogger(__name__)


@dataclass
class CompilerOptions:
    """
    Jinja2 environment settings, bound to the COMPILER_OPTIONS token.

    Args:
        sandbox: Compile in a SandboxedEnvironment (recommended)
        autoescape: Enable HTML autoescaping
        extensions: Jinja2 extensions to enable
        filters: Custom filters
        tests: Custom tests
        globals: Custom global variables/functions
    """
    sandbox: bool = True
    autoescape: bool = True
    extensions: Sequence[Any] = ()
    filters: Dict[str, Callable] = field(default_factory=dict)
    tests: Dict[str, Callable] = field(default_factory=dict)
    globals: Dict[str, Any] = field(default_factory=dict)


class Compiler:
    """
    Compiles application modules.

    The Jinja2 environment is built on first use from the RESOURCE_LOADER
    and COMPILER_OPTIONS bindings of the compiler's providers.
    """

    def __init__(self, injector: Container):
        self.injector = injector
        self._env: Optional[Environment] = None

    async def environment(self) -> Environment:
        if self._env is None:
            loader = await self.injector.resolve_async(RESOURCE_LOADER)
            options = await self.injector.resolve_async(COMPILER_OPTIONS, optional=True)
            self._env = self._create_environment(loader, options or CompilerOptions())
        return self._env

    def _create_environment(self, loader: Any, options: CompilerOptions) -> Environment:
        if options.sandbox:
            env_class = SandboxedEnvironment
        else:
            env_class = Environment

        env = env_class(
            loader=loader,
            autoescape=select_autoescape(
                enabled_extensions=["html", "htm", "xml"],
                default_for_string=True,
            ) if options.autoescape else False,
            extensions=list(options.extensions),
            enable_async=True,
        )

        env.filters.update(options.filters)
        env.tests.update(options.tests)
        env.globals.update(options.globals)

        return env

    async def compile_async(self, module: Any) -> ModuleFactory:
        """
        Compile a module descriptor.

        Args:
            module: AppModule subclass

        Returns:
            Compiled ModuleFactory

        Raises:
            CompileFault: If the module is invalid or its template fails
        """
        if not is_app_module(module):
            raise CompileFault(repr(module), "not an AppModule subclass")

        name = module.__qualname__
        env = await self.environment()

        try:
            if module.template is not None:
                template = env.from_string(module.template)
            elif module.template_url:
                loop = asyncio.get_running_loop()
                template = await loop.run_in_executor(None, env.get_template, module.template_url)
            else:
                raise CompileFault(name, "module declares neither template nor template_url")
        except TemplateError as e:
            raise CompileFault(name, str(e)) from e

        logger.debug("Compiled template for %s", name)

        return ModuleFactory(
            module_type=module,
            template=template,
            selector=module.selector,
            providers=tuple(module.providers),
            bindings=MappingProxyType(dict(module.bindings)),
        )


class CompilerFactory:
    """Creates compilers from compiler-level provider lists."""

    def create_compiler(self, providers: Iterable[Any]) -> Compiler:
        """
        Build a compiler.

        Raises:
            InvalidProviderError: If an entry is not a provider
        """
        return Compiler(Container.from_providers(providers))
