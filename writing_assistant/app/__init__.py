"""
Flask application factory for the Writing Assistant.
Sets up: Config, storage, note store, AI service, composer, API blueprint, and health endpoint.
"""

from __future__ import annotations

import os
from datetime import datetime
from typing import Optional

from flask import Flask, jsonify
from flask_cors import CORS
from loguru import logger

from writing_assistant.ai_service import AIService, create_ai_service
from writing_assistant.composer import ComposerController
from writing_assistant.config import AppConfig, get_config
from writing_assistant.document import DocumentContextProvider
from writing_assistant.storage import KeyValueStorage, create_storage
from writing_assistant.store import NoteStore


def build_composer(
    cfg: AppConfig,
    storage: Optional[KeyValueStorage] = None,
    ai_service: Optional[AIService] = None,
) -> ComposerController:
    """Wire storage, note store, document provider and AI service into a controller."""
    storage = storage if storage is not None else create_storage(cfg.storage)
    store = NoteStore(storage, insert_position=cfg.composer.insert_position)
    document = DocumentContextProvider(
        storage,
        default_goal=cfg.composer.default_document_goal,
        default_context=cfg.composer.default_document_context,
    )
    return ComposerController(store, ai_service or create_ai_service(cfg), document)


def create_app(
    config_object: AppConfig | None = None,
    storage: Optional[KeyValueStorage] = None,
    ai_service: Optional[AIService] = None,
) -> Flask:
    """
    Flask application factory.
    """
    cfg = config_object or get_config()
    app = Flask(__name__)

    # Core config
    app.config.update(
        SECRET_KEY=cfg.web.secret_key,
        MAX_CONTENT_LENGTH=cfg.web.max_content_length,
        JSON_SORT_KEYS=False,
    )

    CORS(app, resources={r"/api/*": {"origins": cfg.web.cors_allowed_origins}})

    app.extensions["writing_assistant.config"] = cfg
    app.extensions["writing_assistant.composer"] = build_composer(cfg, storage, ai_service)

    # Register API blueprint
    from .api import api_bp  # defer import until app exists
    app.register_blueprint(api_bp, url_prefix="/api")

    # Health endpoint
    @app.get("/health")
    def health():
        return jsonify(
            {
                "status": "ok",
                "time": datetime.utcnow().isoformat() + "Z",
                "model": cfg.llm.model,
                "aiBackend": cfg.composer.ai_backend,
                "storage": cfg.storage.backend,
            }
        )

    logger.info(
        f"App initialized. Health at /health. model={cfg.llm.model} "
        f"ai_backend={cfg.composer.ai_backend} storage={cfg.storage.backend}"
    )
    return app


# Convenience for running via `flask run`
# Only create the app automatically when invoked by Flask CLI or explicitly requested.
if os.getenv("FLASK_RUN_FROM_CLI") == "true" or os.getenv("CREATE_FLASK_APP", "").lower() == "true":
    app = create_app()
else:
    app = None
