"""Exceptions raised by the performance engine."""


class PerformanceTestingError(Exception):
    """Base class for performance engine failures."""

    pass


class NavigationError(PerformanceTestingError, RuntimeError):
    """Raised when a page cannot be navigated to or never settles.

    The underlying driver error is chained as ``__cause__``.
    """

    def __init__(self, url: str, message: str):
        self.url = url
        super().__init__(f"Navigation to {url} failed: {message}")


class NetworkEmulationError(PerformanceTestingError, RuntimeError):
    """Raised when network conditions cannot be applied to a page."""

    pass
