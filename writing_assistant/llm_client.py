"""
LLM client for OpenAI API integration.
"""

import math
import time
from typing import Dict, Any, Optional, List

import tiktoken
from openai import AsyncOpenAI, APIConnectionError, APITimeoutError, RateLimitError, InternalServerError
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type
)
from loguru import logger

from writing_assistant.models import TokenUsage
from writing_assistant.config import LLMConfig, get_config

# Only transport-level failures are worth another attempt; bad requests are not.
_TRANSIENT_ERRORS = (APIConnectionError, APITimeoutError, RateLimitError, InternalServerError)


class LLMClient:
    """Client for interacting with OpenAI's API."""

    def __init__(self, config: Optional[LLMConfig] = None):
        """Initialize the LLM client."""
        self.config = config or get_config().llm
        client_kwargs = {
            "api_key": self.config.api_key,
            "base_url": self.config.api_base,
            "timeout": self.config.timeout,
            # Retries are handled by tenacity below
            "max_retries": 0,
        }
        # Each call opens and closes its own AsyncOpenAI; request event loops are short-lived
        self._client_kwargs = client_kwargs

        self.encoding = None
        try:
            self.encoding = tiktoken.encoding_for_model(self.config.model)
        except KeyError:
            self.encoding = tiktoken.get_encoding('cl100k_base')
        except Exception as e:
            # Encoding files are fetched on first use; fall back to heuristic counts
            logger.warning(f"Tokenizer unavailable, using heuristic token counts: {e}")

        logger.info(f"Initialized LLM client with model: {self.config.model}")

    def count_tokens(self, text: str) -> int:
        """Count tokens; fall back to a ~4 chars/token heuristic if encoding fails."""
        if self.encoding is not None:
            try:
                return len(self.encoding.encode(text or ""))
            except ValueError:
                pass
        return max(1, math.ceil(len(text or "") / 4))

    def estimate_tokens(self, messages: List[Dict[str, str]]) -> int:
        """Estimate token count for a list of messages."""
        # Rough estimation including message overhead
        token_count = 0
        for message in messages:
            token_count += 4  # Message overhead
            for key, value in message.items():
                token_count += self.count_tokens(str(value))
        token_count += 2  # Reply overhead
        return token_count

    def _build_messages(self, prompt: str, system_prompt: Optional[str]) -> List[Dict[str, str]]:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        if prompt:
            messages.append({"role": "user", "content": prompt})
        return messages

    def _call_params(self, messages: List[Dict[str, str]], **kwargs) -> Dict[str, Any]:
        call_params = {
            'model': kwargs.get('model') or self.config.model,
            'messages': messages,
            'temperature': kwargs.get('temperature', self.config.temperature),
            'max_tokens': kwargs.get('max_tokens', self.config.max_tokens),
        }
        if kwargs.get('response_format'):
            call_params['response_format'] = kwargs['response_format']
        return call_params

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=30),
        retry=retry_if_exception_type(_TRANSIENT_ERRORS),
        reraise=True
    )
    async def _make_api_call_async(self, messages: List[Dict[str, str]], **kwargs):
        """Make an async API call with retry logic."""
        try:
            async with AsyncOpenAI(**self._client_kwargs) as client:
                return await client.chat.completions.create(**self._call_params(messages, **kwargs))
        except Exception as e:
            logger.error(f"API call failed: {str(e)}")
            raise

    def _token_usage(self, response, prompt_tokens: int, response_text: str, **kwargs) -> TokenUsage:
        usage = getattr(response, 'usage', None)
        if usage is not None:
            token_usage = TokenUsage(
                prompt_tokens=usage.prompt_tokens,
                completion_tokens=usage.completion_tokens,
                total_tokens=usage.total_tokens
            )
        else:
            # Estimate if usage not provided
            completion_tokens = self.count_tokens(response_text)
            token_usage = TokenUsage(
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=prompt_tokens + completion_tokens
            )
        token_usage.max_tokens = kwargs.get('max_tokens', self.config.max_tokens)
        return token_usage

    async def complete_async(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        **kwargs
    ) -> tuple[str, TokenUsage]:
        """
        Generate a completion asynchronously.

        Returns:
            Tuple of (response_text, token_usage). ``response_text`` is empty
            when the model returned no content.
        """
        start_time = time.time()
        messages = self._build_messages(prompt, system_prompt)

        prompt_tokens = self.estimate_tokens(messages)
        max_tokens = kwargs.get('max_tokens', self.config.max_tokens)
        logger.debug(f"Prompt uses ~{prompt_tokens} tokens (completion limit {max_tokens})")

        response = await self._make_api_call_async(messages, **kwargs)
        response_text = response.choices[0].message.content or ""
        token_usage = self._token_usage(response, prompt_tokens, response_text, **kwargs)

        elapsed_time = time.time() - start_time
        logger.debug(f"API call completed in {elapsed_time:.2f}s, used {token_usage.total_tokens} tokens")

        return response_text, token_usage


# Global client instance
_llm_client: Optional[LLMClient] = None


def get_llm_client() -> LLMClient:
    """Get the global LLM client instance."""
    global _llm_client
    if _llm_client is None:
        _llm_client = LLMClient(get_config().llm)
    return _llm_client


def reset_llm_client():
    """Reset the global LLM client instance."""
    global _llm_client
    _llm_client = None
