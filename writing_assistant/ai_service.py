"""
The AI boundary: brainstorm and web-search contracts.

``LLMAIService`` builds prompts, calls the hosted model through ``LLMClient``
and parses the output. ``CannedAIService`` answers from fixed, keyword-matched
data and never touches the network (offline demos, UI development).
Failures surface as ``AIServiceError``.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from loguru import logger

from writing_assistant.config import AppConfig, ComposerConfig, LLMConfig, get_config
from writing_assistant.exceptions import AIServiceError
from writing_assistant.llm_client import LLMClient, get_llm_client
from writing_assistant.models import (
    BrainstormRequest,
    BrainstormResponse,
    WebSearchRequest,
    WebSearchResponse,
    WebSearchResult,
)
from writing_assistant.parsing import clean_search_query, parse_brainstorm_output, parse_web_results
from writing_assistant.prompts import (
    build_brainstorm_prompt,
    build_search_query_prompt,
    build_web_results_prompt,
)

BRAINSTORM_FAILED = "Failed to generate brainstorm ideas"
SEARCH_FAILED = "Failed to generate search results"
NOTE_CONTENT_REQUIRED = "Note content is required"


class AIService(ABC):
    """Abstract AI boundary used by the composer."""

    @abstractmethod
    async def brainstorm(self, request: BrainstormRequest) -> BrainstormResponse:
        """Return labeled bullet points for the note, or raise ``AIServiceError``."""

    @abstractmethod
    async def web_search(self, request: WebSearchRequest) -> WebSearchResponse:
        """Return (simulated) search results for the note, or raise ``AIServiceError``."""


class LLMAIService(AIService):
    """Brainstorm and simulated search backed by the hosted language model."""

    def __init__(
        self,
        config: Optional[ComposerConfig] = None,
        llm_client: Optional[LLMClient] = None,
        llm_config: Optional[LLMConfig] = None,
    ):
        self.config = config or get_config().composer
        self.llm_config = llm_config
        self._llm_client = llm_client

    @property
    def llm_client(self) -> LLMClient:
        # Resolved lazily so the app can boot without an API key
        if self._llm_client is None:
            self._llm_client = LLMClient(self.llm_config) if self.llm_config else get_llm_client()
        return self._llm_client

    async def brainstorm(self, request: BrainstormRequest) -> BrainstormResponse:
        if not request.note_content:
            raise AIServiceError(NOTE_CONTENT_REQUIRED, status_code=400)

        structured = self.config.brainstorm_format == "json"
        prompt = build_brainstorm_prompt(
            request.document_context,
            request.document_goal,
            request.note_content,
            structured=structured,
        )
        extra = {"response_format": {"type": "json_object"}} if structured else {}

        start = time.time()
        try:
            content, token_usage = await self.llm_client.complete_async(
                prompt="",
                system_prompt=prompt,
                temperature=self.config.brainstorm_temperature,
                max_tokens=self.config.brainstorm_max_tokens,
                **extra,
            )
        except Exception as e:
            logger.error(f"Brainstorm model call failed: {e}")
            raise AIServiceError(BRAINSTORM_FAILED) from e

        if not content:
            raise AIServiceError("Empty response from AI service")

        response = parse_brainstorm_output(content)
        logger.info(
            f"Brainstorm produced {len(response.bullet_points)} bullets in {time.time() - start:.2f}s "
            f"({token_usage.total_tokens} tokens)"
        )
        return response

    async def generate_search_query(self, request: WebSearchRequest) -> str:
        prompt = build_search_query_prompt(request.document_context, request.document_goal, request.note_content)
        text, _ = await self.llm_client.complete_async(
            prompt="",
            system_prompt=prompt,
            temperature=self.config.search_query_temperature,
            max_tokens=self.config.search_query_max_tokens,
        )
        return clean_search_query(text, fallback=request.note_content)

    async def web_search(self, request: WebSearchRequest) -> WebSearchResponse:
        if not request.note_content:
            raise AIServiceError(NOTE_CONTENT_REQUIRED, status_code=400)

        try:
            query = await self.generate_search_query(request)
            logger.debug(f"Search query: {query!r}")
            prompt = build_web_results_prompt(query, request.document_context, self.config.web_result_count)
            content, _ = await self.llm_client.complete_async(
                prompt="",
                system_prompt=prompt,
                temperature=self.config.web_results_temperature,
                max_tokens=self.config.web_results_max_tokens,
                response_format={"type": "json_object"},
            )
        except Exception as e:
            logger.error(f"Web search model call failed: {e}")
            raise AIServiceError(SEARCH_FAILED) from e

        results = parse_web_results(content)
        logger.info(f"Web search produced {len(results)} results for query {query!r}")
        return WebSearchResponse(web_results=results)


_CANNED_BULLETS: Dict[str, List[str]] = {
    "default": [
        "Expand: Consider relating this to key enlightenment thinkers like Kant, Locke, or Rousseau",
        "Expand: Explore how this connects to the scientific revolution of the 17th century",
        "Expand: Examine the impact on political structures and governance models",
        "Alternative: Compare and contrast with earlier philosophical traditions",
        "Expand: Incorporate primary sources that demonstrate these ideas in practice",
        "Alternative: Analyze how this influenced art and culture during the period",
    ],
    "voltaire": [
        "Expand: Examine Voltaire's criticism of religious intolerance in 'Treatise on Tolerance'",
        "Expand: Explore his impact on the separation of church and state",
        "Expand: Consider his relationship with European monarchs, especially Frederick the Great",
        "Expand: Analyze how his ideas on freedom of speech influenced later thinkers",
        "Alternative: Some scholars argue Voltaire was more conservative than revolutionary",
        "Expand: Investigate his role in popularizing Newton's scientific ideas in France",
    ],
    "science": [
        "Expand: Research the impact of the Royal Society on scientific progress",
        "Expand: Explore how Bacon's scientific method influenced enlightenment thinking",
        "Expand: Examine Newton's contribution to physics and mathematics",
        "Alternative: Consider how scientific progress challenged religious authority",
        "Expand: Investigate the role of scientific academies across Europe",
        "Expand: Look at how scientific discoveries influenced enlightenment philosophy",
    ],
    "politics": [
        "Expand: Analyze Montesquieu's theory of separation of powers",
        "Expand: Examine how Enlightenment ideas influenced the American and French Revolutions",
        "Expand: Consider Locke's theories of natural rights and their political impact",
        "Expand: Look at Rousseau's ideas about the social contract",
        "Alternative: Explore how enlightenment concepts shaped modern democracy",
        "Expand: Investigate how different countries implemented enlightenment political ideas",
    ],
}

_CANNED_WEB_RESULTS: List[WebSearchResult] = [
    WebSearchResult(
        title="The Stanford Encyclopedia of Philosophy: The Enlightenment",
        url="https://plato.stanford.edu/entries/enlightenment/",
        description=(
            "A comprehensive academic resource on the Enlightenment period. Includes detailed analysis "
            "of major thinkers and their contributions to philosophy, science, and political thought."
        ),
    ),
    WebSearchResult(
        title="Enlightenment and Revolution - History.com",
        url="https://www.history.com/topics/enlightenment-and-revolution",
        description=(
            "An overview of how Enlightenment ideas influenced revolutions across Europe and the Americas. "
            "Explores the connection between philosophical concepts and practical political changes."
        ),
    ),
    WebSearchResult(
        title="The Age of Enlightenment: A History of European Thought - Oxford University Press",
        url="https://global.oup.com/academic/product/the-age-of-enlightenment-9780198735830",
        description=(
            "This scholarly work examines the intellectual, social, and political developments during the "
            "Enlightenment era. It analyzes how new ideas about reason, science, and human rights "
            "transformed European society."
        ),
    ),
]


def canned_topic(note_content: str) -> str:
    """Pick the canned bullet set whose keywords appear in the note."""
    lower = note_content.lower()
    if "voltaire" in lower:
        return "voltaire"
    if any(word in lower for word in ("science", "newton", "experiment")):
        return "science"
    if any(word in lower for word in ("politic", "government", "revolution")):
        return "politics"
    return "default"


class CannedAIService(AIService):
    """Fixed responses keyed on note keywords; no network access."""

    async def brainstorm(self, request: BrainstormRequest) -> BrainstormResponse:
        if not request.note_content.strip():
            raise AIServiceError(NOTE_CONTENT_REQUIRED, status_code=400)
        return BrainstormResponse(bullet_points=list(_CANNED_BULLETS[canned_topic(request.note_content)]))

    async def web_search(self, request: WebSearchRequest) -> WebSearchResponse:
        if not request.note_content.strip():
            raise AIServiceError(NOTE_CONTENT_REQUIRED, status_code=400)
        return WebSearchResponse(web_results=list(_CANNED_WEB_RESULTS))


def create_ai_service(config: Optional[AppConfig] = None) -> AIService:
    """Build the AI service selected by ``composer.ai_backend``."""
    cfg = config or get_config()
    if cfg.composer.ai_backend == "canned":
        logger.info("Using canned AI service (no model calls)")
        return CannedAIService()
    return LLMAIService(cfg.composer, llm_config=cfg.llm)
