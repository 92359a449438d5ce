"""Flask application exposing the diagnosis over HTTP."""

import threading
import uuid
from typing import Any
from urllib.parse import urlparse

import structlog
from flask import Flask, Response, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from ago_diagnosis.api.errors import InvalidRequestError
from ago_diagnosis.diagnosis.service import DiagnosisService
from ago_diagnosis.evaluation.errors import DiagnosisCancelledError
from ago_diagnosis.fetch.redact import redact_url
from ago_diagnosis.observability.logging import (
    bind_request_context,
    clear_request_context,
)
from ago_diagnosis.observability.metrics import metrics_snapshot
from ago_diagnosis.rubric.errors import RubricLoadError
from ago_diagnosis.settings.app import AppSettings, get_settings


logger = structlog.get_logger()

BANNER = "AGO Diagnosis API is running. Use /diagnose?url=YOUR_URL"
ALLOWED_SCHEMES = frozenset({"http", "https"})


def validate_target_url(raw: str | None) -> str:
    """Check the ``url`` query parameter.

    Args:
        raw: Parameter value as received.

    Returns:
        The stripped URL.

    Raises:
        InvalidRequestError: If the parameter is missing or not an
            absolute http(s) URL.
    """
    if raw is None or not raw.strip():
        msg = "Missing url parameter"
        raise InvalidRequestError(msg)

    url = raw.strip()
    parsed = urlparse(url)
    if parsed.scheme.lower() not in ALLOWED_SCHEMES or not parsed.netloc:
        msg = "Invalid url parameter"
        raise InvalidRequestError(msg)
    return url


def create_app(
    settings: AppSettings | None = None,
    service: DiagnosisService | None = None,
) -> Flask:
    """Build the Flask application.

    Args:
        settings: Application settings; read from the environment when
            omitted.
        service: Diagnosis service; built from settings when omitted.

    Returns:
        Configured Flask app.
    """
    settings = settings or get_settings()
    service = service or DiagnosisService.from_settings(settings)

    app = Flask(__name__)
    app.json.sort_keys = False  # type: ignore[attr-defined]
    app.extensions["diagnosis_service"] = service
    CORS(app)

    log = logger.bind(component="api")

    @app.before_request
    def bind_request() -> None:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        bind_request_context(request_id, path=request.path)

    @app.after_request
    def no_store(response: Response) -> Response:
        response.headers["Cache-Control"] = "no-store"
        return response

    @app.teardown_request
    def clear_request(_exc: BaseException | None) -> None:
        clear_request_context()

    @app.errorhandler(InvalidRequestError)
    def invalid_request(exc: InvalidRequestError) -> tuple[Response, int]:
        log.info("request_rejected", reason=exc.message)
        return jsonify({"error": exc.message}), exc.status_code

    @app.errorhandler(DiagnosisCancelledError)
    def diagnosis_cancelled(_exc: DiagnosisCancelledError) -> tuple[Response, int]:
        log.warning(
            "diagnosis_abandoned",
            timeout_seconds=settings.request_timeout_seconds,
        )
        return jsonify({"error": "Diagnosis did not finish in time"}), 503

    @app.errorhandler(RubricLoadError)
    def rubric_unavailable(exc: RubricLoadError) -> tuple[Response, int]:
        log.error("rubric_load_failed", error=str(exc))
        return jsonify({"error": f"Rubric could not be loaded: {exc}"}), 500

    @app.errorhandler(HTTPException)
    def http_error(exc: HTTPException) -> tuple[Response, int]:
        status = exc.code or 500
        return jsonify({"error": exc.name}), status

    @app.errorhandler(Exception)
    def unexpected_error(exc: Exception) -> tuple[Response, int]:
        log.exception("request_failed", error_type=type(exc).__name__)
        return jsonify({"error": "Internal server error"}), 500

    @app.get("/")
    def index() -> Response:
        return Response(BANNER, mimetype="text/plain")

    @app.get("/healthz")
    def healthz() -> Response:
        items = service.repository.get()
        payload: dict[str, Any] = {
            "status": "ok",
            "rubricItems": len(items),
            "judgeAvailable": service.judge_available,
        }
        return jsonify(payload)

    @app.get("/metrics")
    def metrics() -> Response:
        return jsonify(metrics_snapshot())

    @app.get("/diagnose")
    def diagnose() -> tuple[Response, int]:
        url = validate_target_url(request.args.get("url"))
        log.info("diagnose_requested", url=redact_url(url))

        # Caller aborts are invisible to WSGI; the deadline abandons the run instead
        cancel_event = threading.Event()
        deadline = threading.Timer(settings.request_timeout_seconds, cancel_event.set)
        deadline.daemon = True
        deadline.start()
        try:
            report = service.diagnose(url, cancel_event=cancel_event)
        finally:
            deadline.cancel()

        status = 500 if report.failed else 200
        return jsonify(report.to_dict()), status

    return app
