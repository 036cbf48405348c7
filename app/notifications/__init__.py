"""
app/notifications package marker.
"""

from app.notifications.base import NotificationError, NotificationTransport
from app.notifications.mailer import SMTPMailer
from app.notifications.sms import TwilioSMSSender

__all__ = [
    "NotificationError",
    "NotificationTransport",
    "SMTPMailer",
    "TwilioSMSSender",
]
