"""
Best-effort parsing of model output into labeled bullet points and search results.

Model output arrives either as free text with section headers or as a JSON
document. ``sniff_model_output`` classifies it (JSON first, line scanning as
fallback) and the ``parse_*`` helpers normalize each shape. None of the public
functions raise on malformed input: unparseable lines, entries or documents are
skipped and logged.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union

from loguru import logger
from pydantic import ValidationError

from writing_assistant.models import BrainstormResponse, WebSearchResult

# Free-text section headers, in output order, with the label each bullet gets.
SECTION_HEADERS: Tuple[Tuple[str, str, str], ...] = (
    ("integration", "Integration Suggestions:", "Integration"),
    ("expansion", "Expansion Ideas:", "Expand"),
    ("sources", "Relevant Links:", "Source"),
    ("alternatives", "Alternative Perspectives:", "Alternative"),
)

# Structured JSON labels and the prefix each maps to.
STRUCTURED_LABELS: Dict[str, str] = {
    "Expansion Ideas": "Expand",
    "Alternative Perspectives": "Alternative",
    "Relevance": "Relevance",
}

_BULLET_RE = re.compile(r"^(?:[-•]|\d+\.)\s*")
_LINK_RE = re.compile(r"\[(.*?)\]\((.*?)\)")
_FENCE_RE = re.compile(r"^```(?:json|JSON)?\s*(?P<body>.*?)\s*```$", re.DOTALL)


@dataclass(frozen=True)
class FreeTextOutput:
    """Line-oriented model output with section headers."""
    text: str


@dataclass(frozen=True)
class StructuredOutput:
    """Model output that decoded as JSON."""
    data: Any


ParsedModelOutput = Union[FreeTextOutput, StructuredOutput]


def _decode_json(raw: str) -> Optional[Any]:
    """Decode ``raw`` as JSON, unwrapping a ```json fence. None if it is not JSON."""
    text = (raw or "").strip()
    fenced = _FENCE_RE.match(text)
    if fenced:
        text = fenced.group("body")
    if not text or text[0] not in "{[":
        return None
    try:
        return json.loads(text)
    except (json.JSONDecodeError, ValueError) as e:
        logger.debug(f"Model output is not valid JSON: {e}")
        return None


def sniff_model_output(raw: str) -> ParsedModelOutput:
    """Classify raw model output: JSON documents first, free text otherwise."""
    data = _decode_json(raw)
    if data is not None:
        return StructuredOutput(data=data)
    return FreeTextOutput(text=raw or "")


def _section_for_line(line: str) -> Optional[str]:
    for key, header, _label in SECTION_HEADERS:
        if header in line:
            return key
    return None


def parse_free_text(raw: str) -> List[str]:
    """Scan free-text output and return labeled bullets in section order.

    A line containing a known header switches the active section. Bullet lines
    (``-``, ``•`` or ``1.``) under an active section are stripped of their
    prefix and collected; everything else is dropped. In the Relevant Links
    section a Markdown ``[title](url)`` becomes ``Source: title (url)``.
    """
    sections: Dict[str, List[Union[str, Tuple[str, str]]]] = {key: [] for key, _, _ in SECTION_HEADERS}
    current: Optional[str] = None

    for line in (raw or "").splitlines():
        stripped = line.strip()

        header = _section_for_line(stripped)
        if header:
            current = header
            continue

        if not stripped or current is None:
            continue

        bullet = _BULLET_RE.match(stripped)
        if not bullet:
            continue
        cleaned = stripped[bullet.end():].strip()

        if current == "sources":
            link = _LINK_RE.search(stripped)
            if link:
                sections[current].append((link.group(1), link.group(2)))
                continue

        if cleaned:
            sections[current].append(cleaned)

    bullets: List[str] = []
    for key, _header, label in SECTION_HEADERS:
        for item in sections[key]:
            if isinstance(item, tuple):
                title, url = item
                bullets.append(f"{label}: {title} ({url})")
            else:
                bullets.append(f"{label}: {item}")
    return bullets


def _results_list(data: Any) -> List[Any]:
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        results = data.get("results")
        if isinstance(results, list):
            return results
    return []


def bullets_from_structured(data: Any) -> List[str]:
    """Map decoded ``{"results": [{label, description}]}`` to labeled bullets."""
    bullets: List[str] = []
    for entry in _results_list(data):
        if not isinstance(entry, dict):
            continue
        prefix = STRUCTURED_LABELS.get(str(entry.get("label", "")).strip())
        description = entry.get("description")
        if not prefix or not isinstance(description, str) or not description.strip():
            continue
        bullets.append(f"{prefix}: {description.strip()}")
    return bullets


def parse_structured(raw: str) -> List[str]:
    """Parse a structured JSON brainstorm document; malformed JSON yields []."""
    data = _decode_json(raw)
    if data is None:
        logger.warning("Structured brainstorm output could not be decoded; returning no bullets")
        return []
    return bullets_from_structured(data)


def parse_brainstorm_output(raw: str) -> BrainstormResponse:
    """Normalize any brainstorm model output into a ``BrainstormResponse``."""
    parsed = sniff_model_output(raw)
    if isinstance(parsed, StructuredOutput):
        bullets = bullets_from_structured(parsed.data)
    else:
        bullets = parse_free_text(parsed.text)
    if not bullets:
        logger.warning("No recognizable bullet points in model output")
    return BrainstormResponse(bullet_points=bullets)


def parse_web_results(raw: str) -> List[WebSearchResult]:
    """Parse ``{"results": [{title, url, description}]}`` (or a bare array).

    Missing or malformed ``results`` yields an empty list; invalid entries are
    skipped individually.
    """
    data = _decode_json(raw)
    if data is None:
        logger.warning("Web search output could not be decoded; returning no results")
        return []

    results: List[WebSearchResult] = []
    for entry in _results_list(data):
        if not isinstance(entry, dict):
            continue
        try:
            results.append(WebSearchResult(
                title=entry.get("title") or "",
                url=entry.get("url") or "",
                description=entry.get("description") or "",
            ))
        except (ValidationError, TypeError) as e:
            logger.debug(f"Skipping malformed search result {entry!r}: {e}")
    return results


def clean_search_query(raw: str, fallback: str) -> str:
    """First non-empty line of a model-generated query, unquoted; ``fallback`` if none."""
    for line in (raw or "").splitlines():
        query = line.strip().strip('"').strip("'").strip()
        if query.lower().startswith("search query:"):
            query = query[len("search query:"):].strip().strip('"')
        if query:
            return query
    return fallback
