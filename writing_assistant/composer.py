"""
Composer controller: user actions against the note store.

Analyze and search go through the AI boundary. Every boundary failure is
logged and replaced by a canned, user-visible result stored in the field the
success path would have written, and the matching pending flag is always
cleared. Nothing is retried; a retry is the user repeating the action.
"""

from __future__ import annotations

import asyncio
from typing import List, Optional, Tuple

from loguru import logger

from writing_assistant.ai_service import AIService
from writing_assistant.document import DocumentContextProvider
from writing_assistant.exceptions import InvalidNoteError
from writing_assistant.models import (
    BrainstormRequest,
    Note,
    WebSearchRequest,
    WebSearchResult,
)
from writing_assistant.store import NoteStore

EMPTY_NOTE_BULLETS = (
    "Please add some content to your note first.",
    "The AI needs something to work with!",
)

BRAINSTORM_ERROR_BULLETS = (
    "Sorry, there was an error generating ideas.",
    "Please try again in a moment.",
    "If the problem persists, check your API key configuration.",
)

EMPTY_NOTE_WEB_RESULTS = (
    WebSearchResult(
        title="Note is empty",
        url="#",
        description="Please add some content to your note before searching for relevant sources.",
    ),
)

SEARCH_ERROR_WEB_RESULTS = (
    WebSearchResult(
        title="Error occurred",
        url="#",
        description="Sorry, there was an error searching the web. Please try again in a moment.",
    ),
)


class ComposerController:
    """Orchestrates note editing and AI assistance for a single composer panel."""

    def __init__(
        self,
        store: NoteStore,
        ai_service: AIService,
        document: Optional[DocumentContextProvider] = None,
    ) -> None:
        self.store = store
        self.ai_service = ai_service
        self.document = document or DocumentContextProvider()

    # Reads

    def get_notes(self) -> Tuple[Note, ...]:
        return self.store.notes

    def get_note(self, note_id: str) -> Optional[Note]:
        return self.store.get(note_id)

    def get_draft(self, note_id: str) -> Optional[str]:
        return self.store.get_draft(note_id)

    # Lifecycle

    def add_note(self, content: str) -> Note:
        """Create an idle note. Empty or whitespace-only content is rejected."""
        if not content or not content.strip():
            raise InvalidNoteError("Note content cannot be empty")
        note = self.store.insert(Note(id=self.store.next_id(), content=content))
        logger.info(f"Added note {note.id}")
        return note

    def start_edit(self, note_id: str) -> Optional[Note]:
        note = self.store.get(note_id)
        if note is None:
            return None
        self.store.set_draft(note_id, note.content)
        return self.store.update(note_id, is_editing=True)

    def update_draft(self, note_id: str, text: str) -> None:
        note = self.store.get(note_id)
        if note is None or not note.is_editing:
            logger.debug(f"Ignoring draft update for note {note_id} (not editing)")
            return
        self.store.set_draft(note_id, text)

    def save_edit(self, note_id: str) -> Optional[Note]:
        """Commit the draft into ``content`` and leave editing."""
        note = self.store.get(note_id)
        if note is None or not note.is_editing:
            return note
        draft = self.store.discard_draft(note_id)
        content = draft if draft is not None else note.content
        return self.store.update(note_id, content=content, is_editing=False)

    def cancel_edit(self, note_id: str) -> Optional[Note]:
        """Discard the draft; committed ``content`` is untouched."""
        self.store.discard_draft(note_id)
        if note_id not in self.store:
            return None
        return self.store.update(note_id, is_editing=False)

    def delete_note(self, note_id: str) -> bool:
        removed = self.store.remove(note_id)
        if removed:
            logger.info(f"Deleted note {note_id}")
        return removed

    def clear_brainstorm(self, note_id: str) -> Optional[Note]:
        return self.store.update(note_id, brainstorm_bullets=None)

    def clear_web_results(self, note_id: str) -> Optional[Note]:
        return self.store.update(note_id, web_results=None)

    # AI assistance

    def _working_content(self, note: Note) -> str:
        """The text the user currently sees: the draft while editing, else committed content."""
        if note.is_editing:
            return self.store.get_draft(note.id) or ""
        return note.content

    def _request_fields(self, note_content: str) -> dict:
        return {
            "document_context": self.document.get_document_context(),
            "document_goal": self.document.get_document_goal(),
            "note_content": note_content,
        }

    async def analyze(self, note_id: str) -> Optional[Note]:
        """Brainstorm on the note and store labeled bullets (or a canned message)."""
        note = self.store.get(note_id)
        if note is None:
            logger.warning(f"Analyze requested for unknown note {note_id}")
            return None

        content = self._working_content(note)
        if not content.strip():
            return self.store.update(note_id, brainstorm_bullets=list(EMPTY_NOTE_BULLETS), is_analyzing=False)

        self.store.update(note_id, is_analyzing=True)
        try:
            response = await self.ai_service.brainstorm(BrainstormRequest(**self._request_fields(content)))
            bullets = list(response.bullet_points)
        except Exception as e:
            logger.error(f"Error analyzing note {note_id} with AI: {e}")
            bullets = list(BRAINSTORM_ERROR_BULLETS)

        updated = self.store.update(note_id, brainstorm_bullets=bullets, is_analyzing=False)
        if updated is None:
            logger.info(f"Note {note_id} was deleted while analyzing; discarding result")
        return updated

    async def search(self, note_id: str) -> Optional[Note]:
        """Find (simulated) web sources for the note and store them (or a canned message)."""
        note = self.store.get(note_id)
        if note is None:
            logger.warning(f"Search requested for unknown note {note_id}")
            return None

        content = self._working_content(note)
        if not content.strip():
            return self.store.update(note_id, web_results=list(EMPTY_NOTE_WEB_RESULTS), is_searching_web=False)

        self.store.update(note_id, is_searching_web=True)
        try:
            response = await self.ai_service.web_search(WebSearchRequest(**self._request_fields(content)))
            results = list(response.web_results)
        except Exception as e:
            logger.error(f"Error searching web for note {note_id}: {e}")
            results = list(SEARCH_ERROR_WEB_RESULTS)

        updated = self.store.update(note_id, web_results=results, is_searching_web=False)
        if updated is None:
            logger.info(f"Note {note_id} was deleted while searching; discarding result")
        return updated

    async def analyze_and_search_combined(self, content: str) -> Note:
        """Run brainstorm and search for unsaved text, then create one note with both.

        The note only appears once both calls have settled. A failed branch is
        replaced by its canned error payload; the other branch is kept.
        """
        if not content or not content.strip():
            raise InvalidNoteError("Note content cannot be empty")

        fields = self._request_fields(content)
        brainstorm, search = await asyncio.gather(
            self.ai_service.brainstorm(BrainstormRequest(**fields)),
            self.ai_service.web_search(WebSearchRequest(**fields)),
            return_exceptions=True,
        )

        bullets: List[str]
        if isinstance(brainstorm, BaseException):
            logger.error(f"Combined analyze failed: {brainstorm}")
            bullets = list(BRAINSTORM_ERROR_BULLETS)
        else:
            bullets = list(brainstorm.bullet_points)

        results: List[WebSearchResult]
        if isinstance(search, BaseException):
            logger.error(f"Combined search failed: {search}")
            results = list(SEARCH_ERROR_WEB_RESULTS)
        else:
            results = list(search.web_results)

        note = self.store.insert(Note(
            id=self.store.next_id(),
            content=content,
            brainstorm_bullets=bullets,
            web_results=results,
        ))
        logger.info(f"Added note {note.id} with combined analysis")
        return note
