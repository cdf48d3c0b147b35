"""Webhook client delivering follow-up messages for deferred interactions."""

from __future__ import annotations

from typing import Any, Dict, Mapping, Protocol

import httpx
import structlog

from .config import AppSettings
from .constants import DISCORD_API_BASE_URL
from .errors import FollowUpDeliveryError

logger = structlog.get_logger(__name__)


class FollowUpChannel(Protocol):
    """Asynchronous delivery channel addressed by an interaction token."""

    def send(
        self,
        token: str,
        payload: Mapping[str, Any],
        message_id: str | None = None,
    ) -> Dict[str, Any]:
        """Deliver *payload*; edit *message_id* when given, otherwise post a new message."""


class WebhookFollowUpClient:
    """Send follow-ups through the platform's interaction webhook endpoints.

    Failures are raised as :class:`FollowUpDeliveryError` and never retried;
    the interaction token is only valid for a short window, so retry policy
    belongs to the caller.
    """

    def __init__(
        self,
        *,
        application_id: str,
        base_url: str = DISCORD_API_BASE_URL,
        timeout_seconds: float = 10.0,
        client: httpx.Client | None = None,
    ) -> None:
        if not application_id:
            raise ValueError("An application id is required to address follow-ups.")

        self._application_id = application_id
        self._client = client or httpx.Client(base_url=base_url, timeout=timeout_seconds)

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "WebhookFollowUpClient":
        return cls(
            application_id=settings.application_id,
            base_url=settings.api_base_url,
            timeout_seconds=settings.follow_up_timeout_seconds,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "WebhookFollowUpClient":
        return self

    def __exit__(self, *_exc_info: object) -> None:
        self.close()

    def _path(self, token: str, message_id: str | None) -> str:
        path = f"/webhooks/{self._application_id}/{token}"
        if message_id is not None:
            path = f"{path}/messages/{message_id}"
        return path

    def send(
        self,
        token: str,
        payload: Mapping[str, Any],
        message_id: str | None = None,
    ) -> Dict[str, Any]:
        if not token:
            raise FollowUpDeliveryError(
                "Interaction token is missing; cannot send follow-up.", retryable=False
            )

        method = "PATCH" if message_id is not None else "POST"
        path = self._path(token, message_id)
        log = logger.bind(method=method, message_id=message_id)

        try:
            response = self._client.request(method, path, json=dict(payload))
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            body_preview = (exc.response.text or "").strip().replace("\n", " ")[:200]
            log.warning("follow_up_failed", status_code=status_code, body=body_preview)
            raise FollowUpDeliveryError(
                f"Follow-up {method} failed: status={status_code} body={body_preview!r}",
                status_code=status_code,
            ) from exc
        except httpx.HTTPError as exc:
            log.warning("follow_up_failed", error=type(exc).__name__)
            raise FollowUpDeliveryError(f"Follow-up {method} network error: {exc}") from exc

        log.info("follow_up_sent", status_code=response.status_code)
        if not response.content:
            return {}
        try:
            body = response.json()
        except ValueError as exc:
            raise FollowUpDeliveryError(
                "Follow-up returned a non-JSON success response",
                status_code=response.status_code,
            ) from exc
        return body if isinstance(body, dict) else {}
