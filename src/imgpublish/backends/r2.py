"""Cloudflare R2 storage backend.

Objects are stored with a single signed ``PUT`` against R2's
S3-compatible API.  Each upload goes through:

1. Expand the destination key from ``R2Config.path_template``.
2. Sign and send the request.
3. On ``2xx`` -- return the public URL of the object.
4. On ``429`` / ``5xx`` / network error -- back off and retry.
5. On any other status -- raise :class:`UploadRejectedError` with the
   S3 error code from the response body.
6. On max attempts exceeded -- raise :class:`RetryExhaustedError` or
   :class:`UploadTransportError`.
"""

from __future__ import annotations

import asyncio
import re
import time
from typing import Any
from urllib.parse import quote

import httpx
from botocore.auth import S3SigV4Auth
from botocore.awsrequest import AWSRequest
from botocore.credentials import Credentials

from imgpublish.config import R2Config
from imgpublish.errors import RetryExhaustedError, UploadRejectedError, UploadTransportError
from imgpublish.observability import NoopMetricsHook, get_logger
from imgpublish.pipeline.naming import generate_name

from .retries import RETRYABLE_STATUSES, compute_backoff, should_retry

log = get_logger("imgpublish.backends.r2")

_S3_ERROR_CODE_RE = re.compile(r"<Code>([^<]*)</Code>")
_S3_ERROR_MESSAGE_RE = re.compile(r"<Message>([^<]*)</Message>")


def encode_key(key: str) -> str:
    """Percent-encode an object key for use in a request path or URL."""
    return quote(key, safe="/-_.~")


def _parse_retry_after(response: httpx.Response) -> float | None:
    """Extract the ``Retry-After`` header value as a float, or ``None``."""
    raw = response.headers.get("retry-after")
    if raw is None:
        return None
    try:
        return float(raw)
    except (ValueError, TypeError):
        return None


def _rejected(response: httpx.Response, key: str) -> UploadRejectedError:
    """Build the error for a non-retryable response."""
    body = response.text[:1000]
    code_match = _S3_ERROR_CODE_RE.search(body)
    message_match = _S3_ERROR_MESSAGE_RE.search(body)
    backend_code = code_match.group(1) if code_match else ""
    detail = message_match.group(1) if message_match else body[:200]

    summary = backend_code or f"HTTP {response.status_code}"
    if detail:
        summary = f"{summary}: {detail}"
    return UploadRejectedError(
        message=summary,
        context={
            "status_code": response.status_code,
            "backend_code": backend_code,
            "key": key,
        },
    )


class R2Backend:
    """Upload images to a Cloudflare R2 bucket.

    Parameters
    ----------
    config:
        Bucket, credentials, key template and retry settings.
    client:
        Optional pre-built :class:`httpx.AsyncClient`.  The backend only
        closes clients it created itself.
    metrics:
        Optional :class:`~imgpublish.observability.MetricsHook`.
    """

    def __init__(
        self,
        config: R2Config,
        client: httpx.AsyncClient | None = None,
        metrics: Any | None = None,
    ) -> None:
        self._config = config
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(config.timeout_seconds),
        )
        self._metrics = metrics if metrics is not None else NoopMetricsHook()
        self._credentials = Credentials(config.access_key_id, config.secret_access_key)

    # -- public API --------------------------------------------------------

    def object_url(self, key: str) -> str:
        """S3 API URL of *key* inside the configured bucket."""
        return f"{self._config.endpoint}/{self._config.bucket_name}/{encode_key(key)}"

    def public_url(self, key: str) -> str:
        """Public URL readers will fetch *key* from."""
        if self._config.custom_domain_name:
            domain = self._config.custom_domain_name.rstrip("/")
            return f"https://{domain}/{encode_key(key)}"
        return f"https://{self._config.bucket_name}.r2.dev/{encode_key(key)}"

    async def upload(self, content: bytes, filename_hint: str, mime_type: str) -> str:
        """Store *content* and return its public URL.

        Raises
        ------
        UploadRejectedError
            On non-retryable error statuses (403, 404, ...).
        RetryExhaustedError
            When every attempt got a retryable status.
        UploadTransportError
            When every attempt failed at the network level.
        """
        key = generate_name(self._config.path_template, filename_hint)
        url = self.object_url(key)
        await self._put(url, key, content, mime_type)
        return self.public_url(key)

    async def close(self) -> None:
        """Close the HTTP client if this backend created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> R2Backend:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    # -- internals ---------------------------------------------------------

    async def _put(self, url: str, key: str, content: bytes, mime_type: str) -> None:
        cfg = self._config
        max_attempts = cfg.retry_max_attempts
        last_status: int | None = None

        for attempt in range(max_attempts):
            headers = self._sign(url, content, mime_type)

            t0 = time.monotonic()
            try:
                response = await self._client.put(url, content=content, headers=headers)
            except (httpx.TimeoutException, httpx.NetworkError) as exc:
                self._metrics.increment(
                    "imgpublish.requests_total", tags={"backend": "r2", "status": "error"},
                )
                log.warning(
                    "Upload network error",
                    extra={
                        "extra_fields": {
                            "op": "put_object",
                            "key": key,
                            "attempt": attempt + 1,
                            "error": str(exc),
                        }
                    },
                )
                if not should_retry(None, exc, attempt, max_attempts):
                    raise UploadTransportError(
                        message=f"Network error uploading {key}: {exc}",
                        context={"url": url, "attempt": attempt + 1},
                        cause=exc,
                    ) from exc
                await self._backoff(attempt, None, "network_error")
                continue

            elapsed_ms = (time.monotonic() - t0) * 1000
            last_status = response.status_code
            self._metrics.increment(
                "imgpublish.requests_total",
                tags={"backend": "r2", "status": str(response.status_code)},
            )
            log.debug(
                "PUT object",
                extra={
                    "extra_fields": {
                        "op": "put_object",
                        "key": key,
                        "status_code": response.status_code,
                        "duration_ms": round(elapsed_ms, 1),
                    }
                },
            )

            if 200 <= response.status_code < 300:
                return

            if response.status_code not in RETRYABLE_STATUSES:
                raise _rejected(response, key)

            if not should_retry(response.status_code, None, attempt, max_attempts):
                break

            retry_after = _parse_retry_after(response) if response.status_code == 429 else None
            reason = "rate_limited" if response.status_code == 429 else "server_error"
            await self._backoff(attempt, retry_after, reason)

        raise RetryExhaustedError(
            message=(
                f"All {max_attempts} attempts exhausted uploading {key} "
                f"(last status: {last_status})"
            ),
            context={"attempts": max_attempts, "last_status_code": last_status},
        )

    def _sign(self, url: str, content: bytes, mime_type: str) -> dict[str, str]:
        """SigV4 headers for one PUT attempt.  The URL path must already be encoded."""
        request = AWSRequest(
            method="PUT", url=url, data=content, headers={"Content-Type": mime_type},
        )
        S3SigV4Auth(self._credentials, "s3", self._config.region).add_auth(request)
        return dict(request.headers.items())

    async def _backoff(self, attempt: int, retry_after: float | None, reason: str) -> None:
        cfg = self._config
        delay = compute_backoff(
            attempt,
            base=cfg.retry_base_delay,
            maximum=cfg.retry_max_delay,
            jitter=cfg.retry_jitter,
            retry_after=retry_after,
        )
        self._metrics.increment(
            "imgpublish.retries_total", tags={"backend": "r2", "reason": reason},
        )
        await asyncio.sleep(delay)
