"""Library exceptions for the handlertest package."""

from collections.abc import Iterable


class HandlerTestError(Exception):
    """Base exception for handlertest library."""

    pass


class ConfigurationError(HandlerTestError):
    """
    Raised when a test is configured in a way the harness cannot honor.

    Configuration errors are raised at the point of misuse, never deferred
    to verification. Typical causes:
    - Contradictory delivery options (a delay and a not-before date)
    - Running the same HandlerTest twice
    - A handler object without a handle(message, context) capability
    - A message type that cannot be default-instantiated
    """

    pass


class MissingHeaderError(ConfigurationError, KeyError):
    """
    Raised when a handler reads an incoming header that was never configured.

    Subclasses KeyError so that Mapping helpers such as ``get`` and ``in``
    behave as they do for any other mapping.

    Attributes:
        key: The header key that was looked up
        configured_keys: Keys that were configured for the run
    """

    def __init__(self, key: str, configured_keys: Iterable[str] = ()) -> None:
        self.key = key
        self.configured_keys = sorted(configured_keys)
        configured = ", ".join(self.configured_keys) if self.configured_keys else "none"
        super().__init__(
            f"Incoming header '{key}' was not configured for this test. "
            f"Configured headers: {configured}. "
            f"Use set_incoming_header('{key}', ...) to provide it."
        )

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0])


class ExpectationError(HandlerTestError, AssertionError):
    """
    Raised when an expectation is violated after the handler completed.

    Subclasses AssertionError so test runners report it as a test failure
    rather than an error.

    Attributes:
        expectation: Name of the violated expectation (e.g. 'ExpectSend')
        target: The expected message type or operation name
        reason: Human-readable explanation of the violation
    """

    def __init__(self, expectation: str, target: str, reason: str) -> None:
        self.expectation = expectation
        self.target = target
        self.reason = reason
        super().__init__(reason)


__all__ = [
    "HandlerTestError",
    "ConfigurationError",
    "MissingHeaderError",
    "ExpectationError",
]
