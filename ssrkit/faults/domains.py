"""
SSR Faults - Domain-specific fault types.

Provides concrete fault classes for each pipeline stage:
- CONFIG faults (missing bootstrap, invalid settings)
- COMPILE faults
- RENDER faults
- IO faults (document reads)
"""

from typing import Any, Optional
from .core import Fault, FaultDomain, Severity


# ============================================================================
# CONFIG Faults
# ============================================================================

class ConfigFault(Fault):
    """Base class for configuration faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        severity: Severity = Severity.FATAL,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.CONFIG,
            severity=severity,
            retryable=False,
            metadata=metadata,
        )


class BootstrapMissingFault(ConfigFault):
    """Neither the render call nor the engine setup supplied a bootstrap entity."""

    def __init__(self, path: Optional[str] = None, **kwargs):
        super().__init__(
            code="BOOTSTRAP_MISSING",
            message="You must pass in an AppModule or ModuleFactory to be bootstrapped",
            metadata={"path": path, **kwargs.get("metadata", {})},
        )


class ConfigInvalidFault(ConfigFault):
    """Configuration value is invalid."""

    def __init__(self, key: str, reason: str, **kwargs):
        super().__init__(
            code="CONFIG_INVALID",
            message=f"Configuration key '{key}' is invalid: {reason}",
            metadata={"key": key, "reason": reason, **kwargs.get("metadata", {})},
        )


# ============================================================================
# COMPILE Faults
# ============================================================================

class CompileFault(Fault):
    """The compiler rejected a bootstrap entity. Nothing was cached."""

    def __init__(self, entity: str, reason: str, **kwargs):
        super().__init__(
            code=kwargs.get("code", "COMPILE_FAILED"),
            message=f"Failed to compile '{entity}': {reason}",
            domain=FaultDomain.COMPILE,
            metadata={"entity": entity, "reason": reason, **kwargs.get("metadata", {})},
        )


# ============================================================================
# RENDER Faults
# ============================================================================

class RenderFault(Fault):
    """The renderer failed to turn a compiled artifact into HTML."""

    def __init__(self, entity: str, reason: str, **kwargs):
        super().__init__(
            code=kwargs.get("code", "RENDER_FAILED"),
            message=f"Failed to render '{entity}': {reason}",
            domain=FaultDomain.RENDER,
            metadata={"entity": entity, "reason": reason, **kwargs.get("metadata", {})},
        )


class RootElementMissingFault(RenderFault):
    """The document has no element matching the module selector."""

    def __init__(self, entity: str, selector: str, **kwargs):
        super().__init__(
            entity,
            f"document has no <{selector}> element",
            code="ROOT_ELEMENT_MISSING",
            metadata={"selector": selector, **kwargs.get("metadata", {})},
        )


# ============================================================================
# IO Faults
# ============================================================================

class DocumentReadFault(Fault):
    """A template document could not be read from storage."""

    def __init__(self, path: str, reason: str, **kwargs):
        super().__init__(
            code="DOCUMENT_READ_FAILED",
            message=f"Could not read document '{path}': {reason}",
            domain=FaultDomain.IO,
            metadata={"path": path, "reason": reason, **kwargs.get("metadata", {})},
        )
