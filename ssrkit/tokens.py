"""
Injection tokens shared by the render pipeline and the platform.
"""


class InjectionToken:
    """
    Identity-compared DI token for values that have no class of their own.

    Two tokens with the same description are still distinct.
    """

    __slots__ = ("description",)

    def __init__(self, description: str):
        self.description = description

    def __repr__(self) -> str:
        return f"InjectionToken({self.description!r})"


# The incoming request object handed to the engine by the host server
REQUEST = InjectionToken("REQUEST")

# The outgoing response object, when the host supplies one
RESPONSE = InjectionToken("RESPONSE")

# {"document": <template document text>, "url": <request url>}
INITIAL_CONFIG = InjectionToken("INITIAL_CONFIG")

# Loader the compiler uses to resolve template_url references
RESOURCE_LOADER = InjectionToken("RESOURCE_LOADER")

# Optional CompilerOptions for the Jinja2 environment
COMPILER_OPTIONS = InjectionToken("COMPILER_OPTIONS")
