"""Application entry point for the Discord interaction endpoint."""

from __future__ import annotations

import json
from pathlib import Path
from uuid import uuid4

import structlog
from flask import Flask, jsonify, request
from structlog.contextvars import bind_contextvars, unbind_contextvars

from mini_interaction.config import AppSettings, get_settings
from mini_interaction.constants import SIGNATURE_HEADER, TIMESTAMP_HEADER, InteractionType
from mini_interaction.dispatch import InteractionRegistry
from mini_interaction.errors import (
    HandlerNotFoundError,
    InteractionError,
    InvalidInteractionPayload,
)
from mini_interaction.follow_up import FollowUpChannel
from mini_interaction.logging_config import configure_logging
from mini_interaction.responses import InteractionResponse
from mini_interaction.security import is_valid_discord_request


def _error(code: str, status: int, **extra):
    response = jsonify({"error": code, **extra})
    response.status_code = status
    return response


def _register_error_handlers(flask_app: Flask) -> None:
    """Register a JSON error handler that attaches a trace identifier."""

    @flask_app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):  # type: ignore[override]
        trace_id = str(uuid4())
        flask_app.logger.exception(
            "Unhandled application error", extra={"trace_id": trace_id}, exc_info=error
        )
        return _error("internal_server_error", 500, trace_id=trace_id)


def _load_version() -> str:
    version_file = Path(__file__).resolve().parent / "VERSION"
    if version_file.exists():
        return version_file.read_text(encoding="utf-8").strip()
    return "unknown"


def create_app(
    settings: AppSettings | None = None,
    registry: InteractionRegistry | None = None,
    follow_up_channel: FollowUpChannel | None = None,
) -> Flask:
    """Create the Flask application serving the interactions endpoint.

    *registry* holds the application's handlers; when omitted an empty one
    is created, wired to *follow_up_channel* or to a webhook follow-up client
    built from *settings*.
    """

    configure_logging()

    settings = settings or get_settings()
    if registry is None:
        registry = InteractionRegistry(settings=settings, follow_up_channel=follow_up_channel)

    flask_app = Flask(__name__)
    flask_app.config["APP_VERSION"] = _load_version()
    flask_app.extensions["interaction_registry"] = registry
    flask_app.logger.setLevel("INFO")

    _register_error_handlers(flask_app)

    @flask_app.route("/interactions", methods=["POST"])
    def interactions():
        log = structlog.get_logger()
        raw_body = request.get_data()
        timestamp = request.headers.get(TIMESTAMP_HEADER, "")
        signature = request.headers.get(SIGNATURE_HEADER, "")

        if not is_valid_discord_request(
            public_key=settings.public_key,
            timestamp=timestamp,
            body=raw_body,
            signature=signature,
        ):
            log.warning("invalid_signature")
            return _error("invalid_signature", 401)

        try:
            payload = json.loads(raw_body)
        except ValueError:
            return _error("invalid_payload", 400)
        if not isinstance(payload, dict):
            return _error("invalid_payload", 400)

        if payload.get("type") == InteractionType.PING:
            return jsonify(InteractionResponse.pong().to_dict())

        trace_id = str(uuid4())
        bind_contextvars(trace_id=trace_id, interaction_id=payload.get("id"))
        try:
            result = registry.dispatch(payload)
        except InvalidInteractionPayload as exc:
            log.warning("invalid_payload", error=str(exc))
            return _error("invalid_payload", 400)
        except HandlerNotFoundError as exc:
            log.warning("handler_not_found", key=exc.key)
            return _error("unknown_interaction", 404)
        except InteractionError as exc:
            log.error("handler_failed", error=str(exc), error_type=type(exc).__name__)
            return _error("handler_failed", 500, trace_id=trace_id)
        finally:
            unbind_contextvars("trace_id", "interaction_id")

        response = jsonify(result.response.to_dict())
        if result.pending is not None:
            # deferred handlers start only after the deferral body is written
            response.call_on_close(result.start)
        return response

    @flask_app.route("/healthz", methods=["GET"])
    def healthz():
        health: dict[str, object] = {"ok": True}
        health["version"] = flask_app.config.get("APP_VERSION", "unknown")
        health["config"] = "valid"
        health["application_id"] = settings.application_id
        health["follow_ups"] = "enabled" if registry.follow_up_channel is not None else "disabled"
        return jsonify(health), 200

    return flask_app


if __name__ == "__main__":  # pragma: no cover - manual execution helper
    application = create_app()
    application.run(host="0.0.0.0", port=3000, debug=True)
