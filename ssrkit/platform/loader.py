"""
File Loader - document resolver backing the compiler's RESOURCE_LOADER.

Resolves template names to files and reads them through a DocumentCache,
so each file is read from storage at most once per cache.
"""

from typing import Any, Callable, Optional, Tuple, TYPE_CHECKING
from pathlib import Path
import os

from jinja2 import BaseLoader, TemplateNotFound
from jinja2.loaders import split_template_path

if TYPE_CHECKING:
    from ..engine.document_cache import DocumentCache


class FileLoader(BaseLoader):
    """
    Jinja2 loader reading templates through a DocumentCache.

    Template name formats:
        - Absolute: "/srv/app/dist/index.html" -> read as-is
        - Relative: "shop/root.html" -> resolved under ``base_dir``

    Args:
        documents: Shared document cache (a private one if omitted)
        base_dir: Directory relative names resolve against (default: cwd)
    """

    def __init__(
        self,
        documents: Optional["DocumentCache"] = None,
        base_dir: Optional[str] = None,
    ):
        if documents is None:
            # Import here to avoid circular dependency
            from ..engine.document_cache import DocumentCache
            documents = DocumentCache()

        self.documents = documents
        self.base_dir = Path(base_dir) if base_dir else None

    def get_source(
        self,
        environment: Any,
        template: str
    ) -> Tuple[str, Optional[str], Optional[Callable[[], bool]]]:
        """
        Load template source.

        Returns:
            Tuple of (source, filename, uptodate_func)

        Raises:
            TemplateNotFound: If no file exists for the name
            DocumentReadFault: If the file exists but cannot be read
        """
        path = self.resolve_path(template)

        if not os.path.isfile(path):
            raise TemplateNotFound(template)

        source = self.documents.get_sync(path)

        # Cached documents never change
        return source, path, lambda: True

    def resolve_path(self, template: str) -> str:
        """Resolve a template name to a file path."""
        if os.path.isabs(template):
            return os.path.normpath(template)

        base = self.base_dir or Path.cwd()
        return os.path.join(str(base), *split_template_path(template))
