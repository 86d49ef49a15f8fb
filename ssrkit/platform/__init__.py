"""
Default application framework for ssrkit.

Supplies the collaborators the render pipeline drives: module descriptors,
a Jinja2-backed compiler, the file-backed resource loader and the renderer.
"""

from .module import AppModule, ModuleFactory, is_app_module, is_module_factory
from .loader import FileLoader
from .compiler import Compiler, CompilerFactory, CompilerOptions
from .renderer import ModuleRenderer, insert_into_root, render_module_factory

__all__ = [
    "AppModule",
    "ModuleFactory",
    "is_app_module",
    "is_module_factory",
    "FileLoader",
    "Compiler",
    "CompilerFactory",
    "CompilerOptions",
    "ModuleRenderer",
    "insert_into_root",
    "render_module_factory",
]
