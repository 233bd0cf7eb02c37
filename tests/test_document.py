"""Tests for the document context provider."""

import pytest

from writing_assistant.config import DEFAULT_DOCUMENT_CONTEXT, DEFAULT_DOCUMENT_GOAL
from writing_assistant.document import DocumentContextProvider
from writing_assistant.exceptions import StorageError
from writing_assistant.storage import DOCUMENT_GOAL_KEY, KeyValueStorage, MemoryStorage


class ReadOnlyStorage(KeyValueStorage):
    def get(self, key, default=None):
        return default

    def set(self, key, value):
        raise StorageError("read-only")


class TestDocumentContextProvider:
    """Test cases for goal and context lookup."""

    def test_defaults(self, document):
        assert document.get_document_goal() == DEFAULT_DOCUMENT_GOAL == "Research paper on the enlightenment"
        assert document.get_document_context() == DEFAULT_DOCUMENT_CONTEXT

    def test_goal_is_persisted(self, storage, document):
        document.set_document_goal("Essay on Voltaire")
        assert storage.get(DOCUMENT_GOAL_KEY) == "Essay on Voltaire"
        assert DocumentContextProvider(storage).get_document_goal() == "Essay on Voltaire"

    def test_blank_goal_falls_back(self, document):
        document.set_document_goal("   ")
        assert document.get_document_goal() == DEFAULT_DOCUMENT_GOAL

    def test_non_string_goal_falls_back(self):
        document = DocumentContextProvider(MemoryStorage({DOCUMENT_GOAL_KEY: 42}))
        assert document.get_document_goal() == DEFAULT_DOCUMENT_GOAL

    def test_context_falls_back_when_editor_empty(self, document):
        document.set_document_context("Kant asked what enlightenment is.")
        assert document.get_document_context() == "Kant asked what enlightenment is."
        document.set_document_context("  \n")
        assert document.get_document_context() == DEFAULT_DOCUMENT_CONTEXT

    def test_custom_defaults(self, storage):
        document = DocumentContextProvider(storage, default_goal="Goal", default_context="Context")
        assert document.get_document_goal() == "Goal"
        assert document.get_document_context() == "Context"

    def test_goal_write_failure_raises(self):
        with pytest.raises(StorageError):
            DocumentContextProvider(ReadOnlyStorage()).set_document_goal("x")
