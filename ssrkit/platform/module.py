"""
Application module descriptors and their compiled form.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional, Sequence

from jinja2 import Template


class AppModule:
    """
    Base class for application modules rendered on the server.

    A module is declared as a subclass; the class itself is the bootstrap
    entity handed to the engine and is compiled once per cache key.

    Attributes:
        template: Inline Jinja2 source of the module's root view
        template_url: Template name resolved through the compiler's
            resource loader (used when ``template`` is not set)
        selector: Name of the document element the view is rendered into
        providers: Module-level provider entries
        bindings: Template variable name -> injection token

    Example:
        class ShopModule(AppModule):
            template_url = "shop/root.html"
            providers = [ClassProvider(Catalog, Catalog)]
            bindings = {"catalog": Catalog}
    """

    template: Optional[str] = None
    template_url: Optional[str] = None
    selector: str = "app-root"
    providers: Sequence[Any] = ()
    bindings: Mapping[str, Any] = {}


@dataclass(frozen=True, eq=False)
class ModuleFactory:
    """
    Compiled application module.

    Immutable once built; one instance is shared by every render of its
    cache key. Compared and hashed by identity.
    """

    module_type: type
    template: Template
    selector: str = "app-root"
    providers: tuple = ()
    bindings: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def name(self) -> str:
        return self.module_type.__qualname__


def is_app_module(entity: Any) -> bool:
    """Check whether ``entity`` is an uncompiled module descriptor."""
    return isinstance(entity, type) and issubclass(entity, AppModule)


def is_module_factory(entity: Any) -> bool:
    """Check whether ``entity`` is already compiled."""
    return isinstance(entity, ModuleFactory)
