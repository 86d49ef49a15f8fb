"""
Module Renderer - renders a compiled module into its HTML document.
"""

from typing import Any, Iterable
import re

from ..di import Container
from ..faults import Fault, RenderFault, RootElementMissingFault
from ..tokens import INITIAL_CONFIG, REQUEST
from .module import ModuleFactory


async def render_module_factory(
    factory: ModuleFactory,
    *,
    extra_providers: Iterable[Any] = (),
) -> str:
    """
    Render a compiled module.

    Module providers are registered first and ``extra_providers`` after
    them, so call-level entries override module defaults. The module view is
    rendered with its bindings plus ``url`` and ``request``, then placed
    inside the document element named by the module selector.

    Args:
        factory: Compiled module
        extra_providers: Providers for this render; must bind INITIAL_CONFIG

    Returns:
        The full HTML document

    Raises:
        RenderFault: If a binding cannot be resolved or the view fails
    """
    name = factory.name

    try:
        injector = Container.from_providers([*factory.providers, *extra_providers])
        config = await injector.resolve_async(INITIAL_CONFIG)
        request = await injector.resolve_async(REQUEST, optional=True)

        context = {"url": config.get("url"), "request": request}
        for var, token in factory.bindings.items():
            context[var] = await injector.resolve_async(token)

        content = await factory.template.render_async(**context)
    except Fault:
        raise
    except Exception as e:
        raise RenderFault(name, str(e)) from e

    return insert_into_root(name, config["document"], factory.selector, content)


def insert_into_root(name: str, document: str, selector: str, content: str) -> str:
    """
    Replace the children of the first ``<selector>`` element with ``content``.

    Raises:
        RootElementMissingFault: If the document has no such element
    """
    tag = re.escape(selector)
    pattern = re.compile(
        rf"(<{tag}(?:\s[^>]*)?>)(.*?)(</{tag}\s*>)",
        re.DOTALL | re.IGNORECASE,
    )

    match = pattern.search(document)
    if match is None:
        raise RootElementMissingFault(name, selector)

    return document[:match.end(1)] + content + document[match.start(3):]


class ModuleRenderer:
    """Default renderer used by the render pipeline."""

    async def render(self, factory: ModuleFactory, providers: Iterable[Any]) -> str:
        return await render_module_factory(factory, extra_providers=providers)
