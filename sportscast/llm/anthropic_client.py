"""
Anthropic Messages API client for matchup narratives.

Thin async wrapper over httpx; the analyzer treats anything but a
COMPLETED result as a reason to fall back to data-derived text.
"""

import logging
import time
from dataclasses import dataclass
from typing import Optional

import httpx

from sportscast.config import get_settings
from sportscast.telemetry.metrics import record_llm_request

logger = logging.getLogger(__name__)


@dataclass
class AnthropicResult:
    """Result from an Anthropic API call."""

    status: str  # COMPLETED, ERROR, TIMEOUT
    text: str
    tokens_in: int
    tokens_out: int
    exec_ms: int
    model_version: str
    error: Optional[str] = None
    stop_reason: Optional[str] = None  # end_turn, max_tokens, stop_sequence


class AnthropicError(Exception):
    """Error from Anthropic API."""

    pass


class AnthropicClient:
    """Async client for the Anthropic Messages API."""

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        settings = get_settings()
        self.api_key = (settings.ANTHROPIC_API_KEY or "").strip()
        self.url = settings.ANTHROPIC_BASE_URL
        self.version = settings.ANTHROPIC_VERSION
        self.model = settings.LLM_MODEL
        self.max_tokens = settings.LLM_MAX_TOKENS
        self.timeout = settings.LLM_TIMEOUT_SECONDS
        self.llm_enabled = settings.LLM_ENABLED

        self._client: Optional[httpx.AsyncClient] = client

    @property
    def enabled(self) -> bool:
        return self.llm_enabled and bool(self.api_key)

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                headers={"Content-Type": "application/json"},
            )
        return self._client

    async def close(self):
        """Close HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def generate(self, prompt: str, max_tokens: Optional[int] = None) -> AnthropicResult:
        """
        Send a single user message and return the first text block.

        Args:
            prompt: The prompt to send to the model.
            max_tokens: Override default max tokens.

        Returns:
            AnthropicResult with generated text and usage.

        Raises:
            AnthropicError: LLM disabled or API key not configured.
        """
        if not self.enabled:
            record_llm_request("skipped", 0)
            raise AnthropicError("ANTHROPIC_API_KEY not configured or LLM disabled")

        client = await self._get_client()
        headers = {
            "x-api-key": self.api_key,
            "anthropic-version": self.version,
        }
        payload = {
            "model": self.model,
            "max_tokens": max_tokens or self.max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }

        start_time = time.time()
        try:
            response = await client.post(self.url, json=payload, headers=headers)
            elapsed_ms = int((time.time() - start_time) * 1000)

            if response.status_code != 200:
                error_text = response.text[:500]
                logger.error(f"Anthropic API error {response.status_code}: {error_text}")
                record_llm_request("error", elapsed_ms)
                return self._failed("ERROR", elapsed_ms, f"HTTP {response.status_code}: {error_text}")

            data = response.json()
            text = self._extract_text(data)
            usage = data.get("usage", {})
            tokens_in = usage.get("input_tokens", 0)
            tokens_out = usage.get("output_tokens", 0)
            stop_reason = data.get("stop_reason")

            if stop_reason == "max_tokens":
                logger.warning(
                    f"Anthropic stop_reason=max_tokens (tokens_out={tokens_out}, "
                    f"max_tokens={max_tokens or self.max_tokens}, text_len={len(text)})"
                )

            record_llm_request("ok", elapsed_ms, tokens_in, tokens_out)
            return AnthropicResult(
                status="COMPLETED",
                text=text,
                tokens_in=tokens_in,
                tokens_out=tokens_out,
                exec_ms=elapsed_ms,
                model_version=data.get("model", self.model),
                stop_reason=stop_reason,
            )

        except httpx.TimeoutException:
            elapsed_ms = int((time.time() - start_time) * 1000)
            logger.error(f"Anthropic API timeout after {elapsed_ms}ms")
            record_llm_request("timeout", elapsed_ms)
            return self._failed("TIMEOUT", elapsed_ms, "Request timed out")
        except (httpx.HTTPError, ValueError) as e:
            elapsed_ms = int((time.time() - start_time) * 1000)
            logger.exception(f"Anthropic API error: {e}")
            record_llm_request("error", elapsed_ms)
            return self._failed("ERROR", elapsed_ms, str(e))

    def _failed(self, status: str, elapsed_ms: int, error: str) -> AnthropicResult:
        return AnthropicResult(
            status=status,
            text="",
            tokens_in=0,
            tokens_out=0,
            exec_ms=elapsed_ms,
            model_version=self.model,
            error=error,
        )

    def _extract_text(self, response: dict) -> str:
        """First text block of the message content."""
        for block in response.get("content", []):
            if block.get("type") == "text":
                return block.get("text", "")
        return ""
