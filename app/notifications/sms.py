"""
app/notifications/sms.py

Twilio REST API transport for guardian SMS.
"""

from __future__ import annotations

import logging
import time

import requests

from app.config import SMSSettings
from app.notifications.base import NotificationError

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


class TwilioSMSSender:
    """
    Posts messages to the Twilio Messages endpoint.

    ``subject`` is accepted for transport compatibility and ignored; SMS only
    carries the body.
    """

    def __init__(self, settings: SMSSettings, *, session: requests.Session | None = None) -> None:
        self._settings = settings
        self._session = session or requests.Session()

    @property
    def is_configured(self) -> bool:
        return self._settings.is_configured

    def send(self, recipient: str, subject: str, body: str) -> bool:
        if not self._settings.is_configured:
            logger.warning("Twilio sender not configured; dropping SMS to=%s", recipient)
            return False
        if not recipient:
            raise NotificationError("Recipient phone number is empty.")

        url = f"{self._settings.base_url.rstrip('/')}/Accounts/{self._settings.account_sid}/Messages.json"
        payload = {"To": recipient, "From": self._settings.from_number, "Body": body}

        last_error: Exception | None = None
        for attempt in range(self._settings.max_retries + 1):
            try:
                response = self._session.post(
                    url,
                    data=payload,
                    auth=(self._settings.account_sid or "", self._settings.auth_token or ""),
                    timeout=self._settings.timeout_seconds,
                )
            except (requests.Timeout, requests.ConnectionError) as exc:
                last_error = exc
            else:
                if response.status_code < 400:
                    logger.info("SMS sent to=%s status=%s", recipient, response.status_code)
                    return True
                if response.status_code not in RETRYABLE_STATUS_CODES:
                    raise NotificationError(
                        f"Twilio rejected SMS to {recipient}: "
                        f"status={response.status_code} detail={_error_message(response)}"
                    )
                last_error = NotificationError(f"Retryable Twilio status: {response.status_code}")

            if attempt >= self._settings.max_retries:
                break
            backoff_seconds = self._settings.backoff_initial_seconds * (2**attempt)
            logger.warning(
                "SMS send retry to=%s attempt=%s/%s wait_seconds=%.2f",
                recipient,
                attempt + 1,
                self._settings.max_retries,
                backoff_seconds,
            )
            time.sleep(backoff_seconds)

        raise NotificationError(f"SMS to {recipient} failed after retries: {last_error}") from last_error


def _error_message(response: requests.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(payload, dict):
        return str(payload.get("message") or payload)
    return str(payload)
