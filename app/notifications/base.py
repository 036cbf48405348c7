"""
app/notifications/base.py

Transport contract shared by the mail and SMS senders.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


class NotificationError(RuntimeError):
    """
    Raised by a transport when a message could not be handed off.
    """


@runtime_checkable
class NotificationTransport(Protocol):
    def send(self, recipient: str, subject: str, body: str) -> bool:
        """
        Deliver one message; return False when it was not accepted.
        """
        ...
