"""Cancellation tokens checked at the top of every public registry operation."""

import threading

from toolgate.kernel.registry.errors import OperationCancelledError


class CancellationToken:
    """Thread-safe, one-way cancellation flag.

    A token starts live and can be cancelled exactly once; it is never reset.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        """Mark the token as cancelled."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @classmethod
    def cancelled_token(cls) -> "CancellationToken":
        """Build a token that is already cancelled."""
        token = cls()
        token.cancel()
        return token


def check_cancelled(token: CancellationToken | None, operation: str = "") -> None:
    """Raise if ``token`` has been cancelled.

    Args:
        token: Cancellation token, or None for an uncancellable call
        operation: Operation name included in the error message

    Raises:
        OperationCancelledError: If the token is cancelled
    """
    if token is not None and token.cancelled:
        raise OperationCancelledError(operation)
