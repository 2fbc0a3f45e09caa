"""SyncClient - hands a finished AggregateRecord to the dashboard backend.

The record is POSTed as camelCase JSON. Whatever the endpoint answers (it
usually includes a one-time ``loginToken``) is returned to the caller as-is.
"""

from typing import Any

import requests
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from portal_sync.errors import SyncError, TransientError
from portal_sync.logging import get_logger
from portal_sync.models import AggregateRecord

log = get_logger(__name__)


def has_login_token(response: Any) -> bool:
    """Whether a decoded sync response carries a non-empty ``loginToken``."""
    return isinstance(response, dict) and bool(response.get("loginToken"))


class SyncClient:
    """Submit crawl records to the sync endpoint.

    Args:
        url: Sync endpoint URL.
        session: requests session to use; a new one is created when omitted.
        timeout: Request timeout in seconds.
        attempts: Tries for transient failures (network errors, 5xx, 429).
        backoff: Base of the exponential wait between tries, in seconds.
    """

    def __init__(
        self,
        url: str,
        session: requests.Session | None = None,
        *,
        timeout: float = 30.0,
        attempts: int = 3,
        backoff: float = 0.5,
    ) -> None:
        self.url = url
        self.session = session or requests.Session()
        self.timeout = timeout
        self.attempts = attempts
        self.backoff = backoff

    def _post(self, payload: dict[str, Any]) -> Any:
        try:
            response = self.session.post(self.url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            log.warning("sync_request_failed", url=self.url, error=str(e))
            raise TransientError(f"Sync request failed: {e}") from e

        if response.status_code == 429 or response.status_code >= 500:
            log.warning("sync_server_error", status=response.status_code)
            raise TransientError(f"Sync endpoint returned HTTP {response.status_code}")
        if not response.ok:
            raise SyncError(f"Sync endpoint returned HTTP {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            raise SyncError("Sync endpoint returned a non-JSON body") from e

    def submit(self, record: AggregateRecord) -> Any:
        """POST ``record`` and return the decoded response.

        Raises:
            SyncError: If the endpoint rejects the record.
            TransientError: If transient failures outlast every attempt.
        """
        payload = record.to_payload()
        retrying = Retrying(
            stop=stop_after_attempt(self.attempts),
            wait=wait_exponential(multiplier=self.backoff, max=8),
            retry=retry_if_exception_type(TransientError),
            reraise=True,
        )
        result = retrying(self._post, payload)
        log.info(
            "sync_submitted",
            url=self.url,
            login_token=has_login_token(result),
        )
        return result
