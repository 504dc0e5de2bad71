"""
Notifiers - deliver the final RunResult to each notification URL.

A notifier is any callable `notifier(url, result) -> None`. Errors raised by a
notifier are not caught by the runner; they reach the caller of run() so the
enclosing job queue can decide whether to retry.
"""

import logging
from typing import Optional, Protocol, runtime_checkable

import requests

from shellrun.errors import NotificationError
from shellrun.schemas import RunResult

logger = logging.getLogger(__name__)


@runtime_checkable
class Notifier(Protocol):
    """Protocol for sending a run result to a notification URL."""

    def __call__(self, url: str, result: RunResult) -> None:
        ...


class WebhookNotifier:
    """
    POSTs the result record as JSON to each notification URL.

    No retries: a failed delivery raises NotificationError and retrying is
    left to the caller.

    Capture values are sent as UTF-8 text. Bytes that are not valid UTF-8
    arrive as U+FFFD, so binary captures do not survive the payload; read
    them from RunResult.capture in-process, or deliver them to an s3://,
    http:// or file:// output instead.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        self._session = session or requests.Session()
        self._timeout = timeout

    def __call__(self, url: str, result: RunResult) -> None:
        logger.info(f"Sending {result.status.value} notification to {url}")
        try:
            response = self._session.post(
                url,
                json=result.to_dict(),
                headers={"Content-Type": "application/json"},
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise NotificationError(url, f"Error hitting webhook at {url}: {e}") from e

        if response.status_code >= 300:
            raise NotificationError(
                url,
                f"Error hitting webhook at {url} due to error: {response.text!r} "
                f"and error code {response.status_code}.",
                status_code=response.status_code,
            )
