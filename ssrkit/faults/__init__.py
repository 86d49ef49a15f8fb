"""
SSR Faults - typed failures of the render pipeline.

Every failure the pipeline reports through a render callback is one of
these faults:

- BootstrapMissingFault: no bootstrap entity was resolvable
- CompileFault: the compiler rejected the module
- RenderFault: the renderer rejected the compiled module
- DocumentReadFault: the template document could not be read
"""

from .core import (
    Fault,
    FaultDomain,
    Severity,
)

from .domains import (
    ConfigFault,
    BootstrapMissingFault,
    ConfigInvalidFault,
    CompileFault,
    RenderFault,
    RootElementMissingFault,
    DocumentReadFault,
)

__all__ = [
    # Core types
    "Fault",
    "FaultDomain",
    "Severity",

    # Domain faults
    "ConfigFault",
    "BootstrapMissingFault",
    "ConfigInvalidFault",
    "CompileFault",
    "RenderFault",
    "RootElementMissingFault",
    "DocumentReadFault",
]
