# chain_tracker/api/app.py

"""JSON HTTP API over the query service."""

import asyncio
import logging

from flask import Flask, jsonify, request
from flask.typing import ResponseReturnValue
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from chain_tracker.config.settings import Settings
from chain_tracker.context import AppContext
from chain_tracker.models.snapshot import ms_to_iso, now_ms
from chain_tracker.providers.base_provider import ProviderError
from chain_tracker.storage.snapshot_store import StorageError

logger = logging.getLogger("chain_tracker.api")


def create_app(context: AppContext) -> Flask:
    """Build the Flask app bound to one process-scoped context."""
    app = Flask(__name__)
    CORS(app, resources={r"/api/*": {"origins": Settings.CORS_ORIGINS}})

    @app.errorhandler(ProviderError)
    def provider_failed(exc: ProviderError) -> ResponseReturnValue:
        logger.error("Provider error on %s: %s", request.path, exc)
        return jsonify({"error": str(exc)}), 500

    @app.errorhandler(StorageError)
    def storage_failed(exc: StorageError) -> ResponseReturnValue:
        logger.error(
            "Storage error on %s: %s", request.path, exc, exc_info=True,
        )
        return jsonify({"error": str(exc)}), 500

    @app.errorhandler(Exception)
    def unexpected(exc: Exception) -> ResponseReturnValue:
        if isinstance(exc, HTTPException):
            return exc
        logger.error(
            "Unhandled error on %s: %s", request.path, exc, exc_info=True,
        )
        return jsonify({"error": str(exc)}), 500

    @app.get("/api/stats")
    def stats() -> ResponseReturnValue:
        current = asyncio.run(context.query_service.current_stats())
        return jsonify(current.to_dict())

    @app.get("/api/history")
    def history() -> ResponseReturnValue:
        view = context.query_service.history(request.args.get("hours"))
        return jsonify(view.to_dict())

    @app.get("/api/activity")
    def activity() -> ResponseReturnValue:
        return jsonify(context.query_service.activity().to_dict())

    @app.get("/health")
    def health() -> ResponseReturnValue:
        return jsonify({
            "status": "ok",
            "timestamp": ms_to_iso(now_ms()),
        })

    return app
