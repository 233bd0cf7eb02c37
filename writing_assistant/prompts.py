"""
Prompt builders for the brainstorm and web-search calls.

All builders are pure: they render jinja2 templates and embed the document
goal, document context and note content verbatim (no autoescaping). Callers
are responsible for rejecting empty notes before building a prompt.
"""

from __future__ import annotations

import json
from typing import Any, Dict

import jinja2

BRAINSTORM_LABELS = ("Expansion Ideas", "Alternative Perspectives", "Relevance")

_env = jinja2.Environment(autoescape=False, keep_trailing_newline=True)

_BRAINSTORM_TEMPLATE = _env.from_string(
    """
You are an AI writing assistant that helps users integrate research notes into their document.

### Context:
The user is working on a document with the goal: "{{ document_goal }}"
The current document content is: "{{ document_context }}"
The user has added a note they want to incorporate: "{{ note_content }}"

Your task is to analyze the note in relation to the document and provide the following:

1. **Expansion Ideas**: Suggest ways to develop the note further with supporting details.
2. **Alternative Perspectives**: Challenge the note or offer contrasting viewpoints.
{%- if structured %}
3. **Relevance** (optional): Explain how the note serves the document goal.
{%- endif %}

Create a few bullet points for each, make them thought provoking and engaging.
{% if structured %}
### Provide a structured response:
{{ schema }}
{%- else %}
### Provide a structured response:
- **Expansion Ideas:**
- **Alternative Perspectives:**
{%- endif %}
"""
)

_SEARCH_QUERY_TEMPLATE = _env.from_string(
    """You are an AI assistant that helps generate effective search queries.
Based on the following information, create a concise search query (max 10 words) that would help find relevant academic or informational sources.

Document Goal: "{{ document_goal }}"
Document Context: "{{ document_context }}"
User's Note: "{{ note_content }}"

Return ONLY the search query text, with no quotes, labels or explanation."""
)

_WEB_RESULTS_TEMPLATE = _env.from_string(
    """You are an AI assistant that generates mock search results. The user is searching for: "{{ search_query }}" in the context of: "{{ document_context }}".

Create {{ result_count }} highly relevant search results that would be helpful for research on this topic. Each result should include:
1. Title (be specific, include names, dates, and institutions where appropriate)
2. URL (create a plausible URL, using real domains like academic institutions, online journals, etc.)
3. Brief description (2-3 sentences summarizing what the user would find)

{{ schema }}
URLs should be properly formatted and look realistic (e.g., https://www.example.com/path)."""
)


def brainstorm_schema() -> Dict[str, Any]:
    """JSON shape requested from the model for structured brainstorm output."""
    return {
        "results": [
            {
                "label": " | ".join(BRAINSTORM_LABELS),
                "description": "one thought-provoking bullet point",
            }
        ]
    }


def web_results_schema() -> Dict[str, Any]:
    """JSON shape requested from the model for simulated search results."""
    return {
        "results": [
            {
                "title": "result title",
                "url": "https://...",
                "description": "2-3 sentence summary",
            }
        ]
    }


def _schema_text(schema: Dict[str, Any]) -> str:
    return (
        "Return a single JSON object with this shape:\n"
        f"{json.dumps(schema, indent=2)}\n"
        "Ensure valid JSON. Do not include any text outside the JSON."
    )


def build_brainstorm_prompt(
    document_context: str,
    document_goal: str,
    note_content: str,
    structured: bool = False,
) -> str:
    """Build the brainstorm instruction text.

    With ``structured`` the model is asked for a ``{"results": [{label, description}]}``
    JSON object (labels: Expansion Ideas, Alternative Perspectives, Relevance);
    otherwise for free text under ``Expansion Ideas:`` / ``Alternative Perspectives:``
    headers.
    """
    return _BRAINSTORM_TEMPLATE.render(
        document_context=document_context,
        document_goal=document_goal,
        note_content=note_content,
        structured=structured,
        schema=_schema_text(brainstorm_schema()) if structured else "",
    )


def build_search_query_prompt(document_context: str, document_goal: str, note_content: str) -> str:
    """Build the instruction asking for a concise (max 10 words) search query."""
    return _SEARCH_QUERY_TEMPLATE.render(
        document_context=document_context,
        document_goal=document_goal,
        note_content=note_content,
    )


def build_web_results_prompt(search_query: str, document_context: str, result_count: int = 3) -> str:
    """Build the instruction asking the model to simulate search results as JSON."""
    return _WEB_RESULTS_TEMPLATE.render(
        search_query=search_query,
        document_context=document_context,
        result_count=result_count,
        schema=_schema_text(web_results_schema()),
    )
