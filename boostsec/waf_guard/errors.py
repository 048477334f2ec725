"""Exception types raised by wafguard."""


class ConfigurationError(ValueError):
    """Suite document could not be read, parsed or validated."""


class ExecutionError(Exception):
    """A test request could not produce a response."""


class InvalidAddressError(ExecutionError):
    """Base URL or request path does not resolve to an absolute URL."""


class TransportError(ExecutionError):
    """Request failed before a complete response was received.

    Covers DNS failures, refused connections, deadlines, cancellation and
    protocol errors while reading the body.
    """


class FaultError(AssertionError):
    """Programmer error in how the core was called."""
