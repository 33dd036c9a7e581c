"""Exception types shared across wirebuild.

Every fatal error aborts the configuration phase. Nothing in the registry,
fetcher or materializer retries or isolates a failing component.
"""


class WirebuildError(Exception):
    """Base exception for wirebuild errors."""

    pass


class ConfigurationError(WirebuildError):
    """Raised for malformed or missing configuration input.

    Examples: an empty component group, a component named like the target,
    a locator no dependency name can be derived from, no target configured.
    """

    pass


class FetchError(WirebuildError):
    """Raised when a dependency could not be made available locally."""

    pass
