"""
In-memory note collection owned by the composer.

Every mutation builds a new tuple of notes and swaps it in whole
(copy-on-write) under a lock; readers always see a consistent snapshot.
Concurrent completions (async tasks or request threads) therefore race only
per field, last write wins. Updates that name an id no longer present are
silently dropped, so results arriving for a deleted note never resurrect it.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Dict, List, Optional, Tuple

from loguru import logger
from pydantic import ValidationError

from writing_assistant.exceptions import StorageError
from writing_assistant.models import Note, new_note_id
from writing_assistant.storage import NOTES_KEY, KeyValueStorage, MemoryStorage

Listener = Callable[[Tuple[Note, ...]], None]


class NoteStore:
    """Ordered notes plus per-note draft buffers, persisted through ``storage``."""

    def __init__(
        self,
        storage: Optional[KeyValueStorage] = None,
        insert_position: str = "end",
    ) -> None:
        if insert_position not in ("end", "start"):
            raise ValueError(f"Unknown insert_position: {insert_position}")
        self.storage = storage if storage is not None else MemoryStorage()
        self.insert_position = insert_position
        self._notes: Tuple[Note, ...] = ()
        self._drafts: Dict[str, str] = {}
        self._issued_ids: set = set()
        self._listeners: List[Listener] = []
        # Flask serves requests on worker threads; each read-modify-write holds the lock
        self._lock = threading.RLock()
        self._load()

    def _load(self) -> None:
        raw = self.storage.get(NOTES_KEY, [])
        if not isinstance(raw, list):
            logger.warning(f"Ignoring persisted notes: expected a list, got {type(raw).__name__}")
            return
        notes = []
        for item in raw:
            try:
                note = Note(**item)
            except (ValidationError, TypeError) as e:
                logger.warning(f"Skipping unreadable persisted note: {e}")
                continue
            # In-flight calls do not survive a restart; editing restarts from committed content
            note = note.copy(update={"is_analyzing": False, "is_searching_web": False})
            if note.is_editing:
                self._drafts[note.id] = note.content
            notes.append(note)
            self._issued_ids.add(note.id)
        self._notes = tuple(notes)
        logger.info(f"Loaded {len(self._notes)} notes from storage")

    # Reads

    @property
    def notes(self) -> Tuple[Note, ...]:
        return self._notes

    def get(self, note_id: str) -> Optional[Note]:
        for note in self._notes:
            if note.id == note_id:
                return note
        return None

    def __contains__(self, note_id: str) -> bool:
        return self.get(note_id) is not None

    def __len__(self) -> int:
        return len(self._notes)

    def get_draft(self, note_id: str) -> Optional[str]:
        return self._drafts.get(note_id)

    # Subscriptions

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for every committed change; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _commit(self, notes: Tuple[Note, ...]) -> None:
        self._notes = notes
        try:
            self.storage.set(NOTES_KEY, [n.dict(by_alias=True) for n in notes])
        except StorageError as e:
            logger.error(f"Failed to persist notes: {e}")
        for listener in list(self._listeners):
            try:
                listener(notes)
            except Exception as e:
                logger.warning(f"Note store listener failed: {e}")

    # Mutations

    def next_id(self) -> str:
        """Return an id that no note in this store has ever used."""
        with self._lock:
            note_id = new_note_id()
            while note_id in self._issued_ids:
                note_id = new_note_id()
            return note_id

    def insert(self, note: Note) -> Note:
        """Add ``note`` at the configured end of the collection. Ids are never reused."""
        with self._lock:
            if note.id in self._issued_ids:
                raise ValueError(f"Note id already used: {note.id}")
            self._issued_ids.add(note.id)
            if self.insert_position == "start":
                self._commit((note,) + self._notes)
            else:
                self._commit(self._notes + (note,))
        return note

    def update(self, note_id: str, **fields: Any) -> Optional[Note]:
        """Replace the note's ``fields``. Returns the new note, or None if the id is absent."""
        with self._lock:
            updated: Optional[Note] = None
            notes = []
            for note in self._notes:
                if note.id == note_id:
                    updated = note.copy(update=fields)
                    notes.append(updated)
                else:
                    notes.append(note)
            if updated is None:
                logger.debug(f"Dropping update for missing note {note_id}: {sorted(fields)}")
                return None
            self._commit(tuple(notes))
        return updated

    def remove(self, note_id: str) -> bool:
        """Remove the note and its draft. Returns whether a note was removed."""
        with self._lock:
            self._drafts.pop(note_id, None)
            notes = tuple(n for n in self._notes if n.id != note_id)
            if len(notes) == len(self._notes):
                return False
            self._commit(notes)
        return True

    def set_draft(self, note_id: str, text: str) -> None:
        with self._lock:
            if note_id in self:
                self._drafts[note_id] = text

    def discard_draft(self, note_id: str) -> Optional[str]:
        with self._lock:
            return self._drafts.pop(note_id, None)
