"""
Compiler Context - the engine's compilers.

Owns one default compiler built at engine setup and builds one-off
compilers for render calls that bring their own compiler providers.
"""

from typing import Any, Callable, List, Optional, Sequence
import logging

from ..di import ValueProvider
from ..platform.compiler import Compiler, CompilerFactory
from ..platform.loader import FileLoader
from ..tokens import RESOURCE_LOADER
from .document_cache import DocumentCache


logger = logging.getLogger(__name__)


class CompilerContext:
    """
    Produces compilers configured with a document resolver plus any
    caller-supplied compiler providers.

    Args:
        documents: Document cache backing the default RESOURCE_LOADER
        setup_compiler_providers: Setup-level compiler providers; bound
            after the default loader so they can replace it
        compiler_factory: Factory used to build compilers
        base_dir: Directory relative template names resolve against
    """

    def __init__(
        self,
        documents: DocumentCache,
        setup_compiler_providers: Optional[Sequence[Any]] = None,
        compiler_factory: Optional[CompilerFactory] = None,
        base_dir: Optional[str] = None,
    ):
        self.compiler_factory = compiler_factory or CompilerFactory()
        self.providers: List[Any] = [
            ValueProvider(RESOURCE_LOADER, FileLoader(documents, base_dir=base_dir)),
        ]
        self.providers.extend(setup_compiler_providers or ())

        self.default: Compiler = self.compiler_factory.create_compiler(self.providers)

    def create_with_extra(self, call_compiler_providers: Sequence[Any]) -> Compiler:
        """Build a fresh compiler; the result is not cached."""
        logger.debug(
            "Creating compiler with %d call-level providers", len(call_compiler_providers)
        )
        return self.compiler_factory.create_compiler(
            self.providers + list(call_compiler_providers)
        )

    def supplier_for(
        self,
        call_compiler_providers: Optional[Sequence[Any]] = None,
    ) -> Callable[[], Compiler]:
        """
        Return the compiler supplier for a render call.

        The supplier only builds a compiler when called, which the factory
        cache does on a miss.
        """
        if call_compiler_providers is not None:
            return lambda: self.create_with_extra(call_compiler_providers)
        return lambda: self.default
