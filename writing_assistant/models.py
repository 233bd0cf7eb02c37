"""
Data models for the Writing Assistant.

Field aliases follow the camelCase names used on the wire and in persisted
note collections (``bulletPoints``, ``webResults``, ``isLoadingAI``...).
"""

import time
import uuid
from enum import Enum
from typing import List, Optional, Set

from pydantic import BaseModel, Field, validator


def new_note_id() -> str:
    """Generate an opaque note id: ``note-<ms timestamp>-<random suffix>``."""
    return f"note-{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}"


class NoteStatus(str, Enum):
    """Lifecycle states a note can be in. Analyzing and searching may overlap."""
    IDLE = "idle"
    EDITING = "editing"
    ANALYZING = "analyzing"
    SEARCHING = "searching"


class TokenUsage(BaseModel):
    """Token usage tracking for LLM calls."""
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0
    # Echo the max_tokens limit used for this completion (for display/telemetry)
    max_tokens: Optional[int] = None


class WebSearchResult(BaseModel):
    """A single (simulated) web search hit."""
    title: str
    url: str
    description: str = ""

    @validator('title', 'url')
    def not_blank(cls, v):
        if not v or not v.strip():
            raise ValueError('Search result title and url cannot be empty')
        return v.strip()

    class Config:
        frozen = True


class Note(BaseModel):
    """A composer note. Instances are immutable; the store replaces them on change."""
    id: str = Field(default_factory=new_note_id)
    content: str = ""
    is_editing: bool = Field(default=False, alias="isEditing")
    brainstorm_bullets: Optional[List[str]] = Field(default=None, alias="brainstormBullets")
    is_analyzing: bool = Field(default=False, alias="isLoadingAI")
    web_results: Optional[List[WebSearchResult]] = Field(default=None, alias="webResults")
    is_searching_web: bool = Field(default=False, alias="isSearchingWeb")

    class Config:
        frozen = True
        populate_by_name = True

    @property
    def status(self) -> Set[NoteStatus]:
        states = set()
        if self.is_editing:
            states.add(NoteStatus.EDITING)
        if self.is_analyzing:
            states.add(NoteStatus.ANALYZING)
        if self.is_searching_web:
            states.add(NoteStatus.SEARCHING)
        return states or {NoteStatus.IDLE}

    def to_wire(self) -> dict:
        """Serialize with camelCase keys, as persisted and served over HTTP."""
        data = self.dict(by_alias=True)
        data["status"] = sorted(s.value for s in self.status)
        return data


class BrainstormRequest(BaseModel):
    """Request for the brainstorm contract."""
    document_context: str = Field(default="", alias="documentContext")
    document_goal: str = Field(default="", alias="documentGoal")
    note_content: str = Field(default="", alias="noteContent")

    class Config:
        frozen = True
        populate_by_name = True


class WebSearchRequest(BrainstormRequest):
    """Request for the web-search contract (same shape as brainstorm)."""


class BrainstormResponse(BaseModel):
    """Successful brainstorm result: labeled bullet strings."""
    bullet_points: List[str] = Field(default_factory=list, alias="bulletPoints")

    class Config:
        frozen = True
        populate_by_name = True


class WebSearchResponse(BaseModel):
    """Successful web-search result."""
    web_results: List[WebSearchResult] = Field(default_factory=list, alias="webResults")

    class Config:
        frozen = True
        populate_by_name = True
