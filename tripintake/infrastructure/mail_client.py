"""Resilient Mail Client — wraps the SendGrid v3 REST API with retry, backoff, and error mapping.

Invariants:
    - Rate limits (429): exponential backoff with jitter, respects Retry-After header
    - Transient errors (5xx, connection, timeout): max_retries retries with backoff
    - Client errors (4xx except 429): immediate failure, no retry
    - All failures mapped to NotificationError (core/errors.py)
    - One httpx.AsyncClient per instance, built at construction and closed via aclose()

Design Decisions:
    - Wrapper over raw HTTP: isolates retry logic from the notifier (ADR: single responsibility)
    - ±25% jitter on backoff: prevents thundering herd on shared rate limits
    - Transport is injectable so tests substitute httpx.MockTransport
      (ADR: constructed once at startup, passed by reference; no lazy global handle)
"""

import asyncio
import logging
import random

import httpx

from tripintake.core.errors import ErrorContext, NotificationError
from tripintake.core.format_messages import MailMessage

logger = logging.getLogger(__name__)

_SEND_PATH = "/v3/mail/send"


class ResilientMailClient:
    """Sends MailMessages through SendGrid with retry logic, timeouts, and error mapping."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.sendgrid.com",
        max_retries: int = 3,
        base_delay_ms: int = 500,
        max_delay_ms: int = 10_000,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout_seconds,
            headers={"Authorization": f"Bearer {api_key}"},
            transport=transport,
        )
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms

    async def send(
        self, message: MailMessage, context: ErrorContext | None = None,
    ) -> None:
        """Send one message, retrying transient failures."""
        payload = _payload(message)
        for attempt in range(self.max_retries + 1):
            try:
                response = await self.client.post(_SEND_PATH, json=payload)
            except httpx.TimeoutException as e:
                await self._handle_transient_error(e, attempt, context, "timeout")
                continue
            except httpx.TransportError as e:
                await self._handle_transient_error(e, attempt, context, "connection_error")
                continue

            if response.status_code < 300:
                logger.info(
                    "Mail sent",
                    extra={"attempt": attempt + 1, "status_code": response.status_code},
                )
                return
            if response.status_code == 429:
                await self._handle_rate_limit(response, attempt, context)
            elif response.status_code >= 500:
                await self._handle_transient_error(
                    httpx.HTTPStatusError(
                        f"server error {response.status_code}",
                        request=response.request, response=response,
                    ),
                    attempt, context, "server_error",
                )
            else:
                raise NotificationError(
                    f"rejected with {response.status_code}: {response.text[:200]}",
                    "client_error", context=context,
                )

    async def aclose(self) -> None:
        await self.client.aclose()

    async def _handle_rate_limit(
        self, response: httpx.Response, attempt: int, context: ErrorContext | None,
    ) -> None:
        """Handle rate limit response with retry or raise."""
        retry_after_ms = self._extract_retry_after(response)
        if attempt >= self.max_retries:
            raise NotificationError(
                "Rate limit exceeded after retries",
                "rate_limit",
                retry_after_ms=retry_after_ms,
                context=context,
            )
        delay = retry_after_ms if retry_after_ms is not None else self._backoff(attempt)
        logger.warning(
            f"Mail rate limit hit, retry after {delay}ms",
            extra={"attempt": attempt + 1},
        )
        await asyncio.sleep(delay / 1000)

    async def _handle_transient_error(
        self, e: Exception, attempt: int, context: ErrorContext | None, kind: str,
    ) -> None:
        """Handle transient errors with retry or raise."""
        if attempt >= self.max_retries:
            raise NotificationError(
                f"Transient failure after {self.max_retries} retries: {e}",
                kind,
                context=context,
            )
        delay = self._backoff(attempt)
        logger.warning(
            f"Transient mail error, retry after {delay}ms: {e}",
            extra={"attempt": attempt + 1},
        )
        await asyncio.sleep(delay / 1000)

    def _backoff(self, attempt: int) -> int:
        """Exponential backoff with ±25% jitter."""
        delay = min(self.max_delay_ms, (2 ** attempt) * self.base_delay_ms)
        return int(delay * random.uniform(0.75, 1.25))  # nosec B311

    def _extract_retry_after(self, response: httpx.Response) -> int | None:
        """Extract Retry-After header (returns milliseconds)."""
        val = response.headers.get("retry-after")
        if val is None:
            return None
        try:
            return max(0, int(val)) * 1000
        except ValueError:
            return None


def _payload(message: MailMessage) -> dict:
    return {
        "personalizations": [{"to": [{"email": message.to}]}],
        "from": {"email": message.sender},
        "subject": message.subject,
        "content": [{"type": "text/html", "value": message.html}],
    }
