"""Cancellation token shared between a run and the code that may abort it."""

import threading
from typing import Optional

from hollywood_studio.core.errors import GenerationCancelled


class CancellationToken:
    """
    Thread-safe cancellation flag checked at every suspension point.

    A token created with a parent is also cancelled whenever the parent is,
    so one stage can be stopped without cancelling the whole run.
    """

    def __init__(self, parent: Optional["CancellationToken"] = None):
        self._event = threading.Event()
        self._parent = parent
        self._reason: Optional[str] = None

    def cancel(self, reason: str = "cancelled by caller") -> None:
        """Request cancellation."""
        self._reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self._parent is not None and self._parent.cancelled

    @property
    def reason(self) -> Optional[str]:
        if self._event.is_set():
            return self._reason
        return self._parent.reason if self._parent is not None else None

    def raise_if_cancelled(self, stage: Optional[str] = None) -> None:
        """
        Raise GenerationCancelled if cancellation was requested.

        Args:
            stage: Optional pipeline stage for the error details
        """
        if self.cancelled:
            details = {"reason": self.reason}
            if stage:
                details["stage"] = stage
            raise GenerationCancelled(details=details)


def check_cancelled(token: Optional[CancellationToken], stage: Optional[str] = None) -> None:
    """raise_if_cancelled for an optional token."""
    if token is not None:
        token.raise_if_cancelled(stage)
