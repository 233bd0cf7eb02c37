"""
API blueprint for the Writing Assistant.

Endpoints:
- GET  /api/health
- GET  /api/config
- POST /api/brainstorm              (brainstorm contract)
- POST /api/search                  (web-search contract)
- GET  /api/notes                   (ordered note collection)
- POST /api/notes                   (add a note)
- POST /api/notes/combined          (analyze + search unsaved text, then add)
- DELETE /api/notes/<id>
- POST /api/notes/<id>/edit | /save | /cancel, PUT /api/notes/<id>/draft
- POST /api/notes/<id>/analyze | /search
- DELETE /api/notes/<id>/brainstorm | /web-results
- GET/PUT /api/document             (goal and editor text)
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Optional

from flask import Blueprint, current_app, jsonify, request
from loguru import logger

from writing_assistant.ai_service import NOTE_CONTENT_REQUIRED
from writing_assistant.composer import ComposerController
from writing_assistant.config import AppConfig
from writing_assistant.exceptions import AIServiceError, InvalidNoteError, StorageError
from writing_assistant.models import BrainstormRequest, Note, WebSearchRequest

api_bp = Blueprint("api", __name__)


def _composer() -> ComposerController:
    return current_app.extensions["writing_assistant.composer"]


def _config() -> AppConfig:
    return current_app.extensions["writing_assistant.config"]


def _payload() -> Dict[str, Any]:
    return request.get_json(silent=True) or {}


def _note_json(note: Optional[Note]):
    if note is None:
        return jsonify({"ok": False, "error": "Note not found"}), 404
    composer = _composer()
    data = note.to_wire()
    if note.is_editing:
        data["draft"] = composer.get_draft(note.id)
    return jsonify({"ok": True, "note": data})


@api_bp.get("/health")
def api_health():
    cfg = _config()
    return jsonify(
        {
            "status": "ok",
            "model": cfg.llm.model,
            "composer": {
                "ai_backend": cfg.composer.ai_backend,
                "brainstorm_format": cfg.composer.brainstorm_format,
                "insert_position": cfg.composer.insert_position,
            },
            "storage": cfg.storage.backend,
            "notes": len(_composer().get_notes()),
        }
    )


@api_bp.get("/config")
def api_config():
    return jsonify(_config().to_dict())


# AI contracts

def _contract_request(cls):
    """Build a brainstorm/search request, defaulting goal and context from the document provider."""
    payload = _payload()
    note_content = payload.get("noteContent")
    if not isinstance(note_content, str) or not note_content:
        return None
    document = _composer().document
    return cls(
        document_context=payload.get("documentContext") or document.get_document_context(),
        document_goal=payload.get("documentGoal") or document.get_document_goal(),
        note_content=note_content,
    )


@api_bp.post("/brainstorm")
def api_brainstorm():
    req = _contract_request(BrainstormRequest)
    if req is None:
        return jsonify({"ok": False, "error": NOTE_CONTENT_REQUIRED}), 400
    try:
        response = asyncio.run(_composer().ai_service.brainstorm(req))
    except AIServiceError as e:
        return jsonify({"ok": False, "error": e.message}), e.status_code
    return jsonify({"ok": True, **response.dict(by_alias=True)})


@api_bp.post("/search")
def api_search():
    req = _contract_request(WebSearchRequest)
    if req is None:
        return jsonify({"ok": False, "error": NOTE_CONTENT_REQUIRED}), 400
    try:
        response = asyncio.run(_composer().ai_service.web_search(req))
    except AIServiceError as e:
        return jsonify({"ok": False, "error": e.message}), e.status_code
    return jsonify({"ok": True, **response.dict(by_alias=True)})


# Notes

@api_bp.get("/notes")
def api_list_notes():
    return jsonify({"ok": True, "notes": [n.to_wire() for n in _composer().get_notes()]})


@api_bp.post("/notes")
def api_add_note():
    content = _payload().get("content", "")
    try:
        note = _composer().add_note(content if isinstance(content, str) else "")
    except InvalidNoteError as e:
        return jsonify({"ok": False, "error": str(e)}), 400
    return jsonify({"ok": True, "note": note.to_wire()}), 201


@api_bp.post("/notes/combined")
def api_add_note_combined():
    content = _payload().get("content", "")
    try:
        note = asyncio.run(_composer().analyze_and_search_combined(content if isinstance(content, str) else ""))
    except InvalidNoteError as e:
        return jsonify({"ok": False, "error": str(e)}), 400
    return jsonify({"ok": True, "note": note.to_wire()}), 201


@api_bp.get("/notes/<note_id>")
def api_get_note(note_id: str):
    return _note_json(_composer().get_note(note_id))


@api_bp.delete("/notes/<note_id>")
def api_delete_note(note_id: str):
    return jsonify({"ok": True, "deleted": _composer().delete_note(note_id)})


@api_bp.post("/notes/<note_id>/edit")
def api_start_edit(note_id: str):
    return _note_json(_composer().start_edit(note_id))


@api_bp.put("/notes/<note_id>/draft")
def api_update_draft(note_id: str):
    text = _payload().get("draft", "")
    composer = _composer()
    composer.update_draft(note_id, text if isinstance(text, str) else "")
    return _note_json(composer.get_note(note_id))


@api_bp.post("/notes/<note_id>/save")
def api_save_edit(note_id: str):
    return _note_json(_composer().save_edit(note_id))


@api_bp.post("/notes/<note_id>/cancel")
def api_cancel_edit(note_id: str):
    return _note_json(_composer().cancel_edit(note_id))


@api_bp.post("/notes/<note_id>/analyze")
def api_analyze_note(note_id: str):
    return _note_json(asyncio.run(_composer().analyze(note_id)))


@api_bp.post("/notes/<note_id>/search")
def api_search_note(note_id: str):
    return _note_json(asyncio.run(_composer().search(note_id)))


@api_bp.delete("/notes/<note_id>/brainstorm")
def api_clear_brainstorm(note_id: str):
    return _note_json(_composer().clear_brainstorm(note_id))


@api_bp.delete("/notes/<note_id>/web-results")
def api_clear_web_results(note_id: str):
    return _note_json(_composer().clear_web_results(note_id))


# Document

@api_bp.get("/document")
def api_get_document():
    document = _composer().document
    return jsonify(
        {
            "ok": True,
            "documentGoal": document.get_document_goal(),
            "documentContext": document.get_document_context(),
        }
    )


@api_bp.put("/document")
def api_update_document():
    payload = _payload()
    document = _composer().document
    if isinstance(payload.get("documentContext"), str):
        document.set_document_context(payload["documentContext"])
    if isinstance(payload.get("documentGoal"), str):
        try:
            document.set_document_goal(payload["documentGoal"])
        except StorageError as e:
            logger.error(f"Document goal update failed: {e}")
            return jsonify({"ok": False, "error": f"Failed to save document goal: {e}"}), 500
    return api_get_document()
