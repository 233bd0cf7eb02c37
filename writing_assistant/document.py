"""
Document goal and text, as seen by the composer.

The editor writes the current text and the goal; the composer only reads them.
The goal is persisted under ``document-goal``; both values fall back to
configured defaults when unset.
"""

from __future__ import annotations

from typing import Optional

from loguru import logger

from writing_assistant.config import DEFAULT_DOCUMENT_CONTEXT, DEFAULT_DOCUMENT_GOAL
from writing_assistant.exceptions import StorageError
from writing_assistant.storage import DOCUMENT_GOAL_KEY, KeyValueStorage, MemoryStorage


class DocumentContextProvider:
    def __init__(
        self,
        storage: Optional[KeyValueStorage] = None,
        default_goal: str = DEFAULT_DOCUMENT_GOAL,
        default_context: str = DEFAULT_DOCUMENT_CONTEXT,
    ) -> None:
        self.storage = storage if storage is not None else MemoryStorage()
        self.default_goal = default_goal
        self.default_context = default_context
        self._context = ""

    def get_document_context(self) -> str:
        """Current editor text, or the default passage when the editor is empty."""
        return self._context if self._context.strip() else self.default_context

    def get_document_goal(self) -> str:
        goal = self.storage.get(DOCUMENT_GOAL_KEY)
        if isinstance(goal, str) and goal.strip():
            return goal
        return self.default_goal

    def set_document_context(self, text: str) -> None:
        self._context = text or ""

    def set_document_goal(self, goal: str) -> None:
        try:
            self.storage.set(DOCUMENT_GOAL_KEY, goal or "")
        except StorageError as e:
            logger.error(f"Failed to persist document goal: {e}")
            raise
