"""Generate short movie synopses with a hosted chat model."""

from __future__ import annotations

import logging
import threading
from typing import Any

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from movie_service.core.config import Settings, get_settings
from movie_service.services.errors import GenerationError

logger = logging.getLogger(__name__)

_SYSTEM_PROMPT = (
    "You are a helpful AI assistant that specializes in movie summaries in 100 words. "
    "Just return the summary."
)


def build_summary_prompt(title: str, release_year: int, genre: str) -> str:
    return (
        f"Provide a short summary of 100 words for the movie '{title}', "
        f"released in {release_year}, which falls under the genre {genre}."
    )


class SummaryGenerator:
    """Stateless wrapper around ChatOpenAI; a failed call is never retried."""

    def __init__(self, *, llm: Any | None = None, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self._llm = llm
        self._lock = threading.Lock()

    def _get_llm(self) -> Any:
        if self._llm is not None:
            return self._llm
        if not self.settings.openai_api_key:
            raise GenerationError("OPENAI_API_KEY is not configured")
        with self._lock:
            if self._llm is None:
                self._llm = ChatOpenAI(
                    model=self.settings.openai_model,
                    api_key=self.settings.openai_api_key,
                    max_tokens=self.settings.summary_max_tokens,
                )
        return self._llm

    def generate(self, title: str, release_year: int, genre: str) -> str:
        llm = self._get_llm()
        try:
            ai_message = llm.invoke(
                [
                    SystemMessage(content=_SYSTEM_PROMPT),
                    HumanMessage(content=build_summary_prompt(title, release_year, genre)),
                ]
            )
        except Exception as exc:
            logger.warning("Summary generation failed for '%s': %s", title, exc)
            raise GenerationError(f"summary generation failed: {exc}") from exc

        summary = _first_text(getattr(ai_message, "content", None))
        if not summary:
            raise GenerationError("no summary returned")
        return summary


def _first_text(content: Any) -> str:
    """Pull the first text block out of a chat reply (plain string or block list)."""
    if isinstance(content, str):
        return content.strip()
    if not content:
        return ""
    block = content[0]
    if isinstance(block, str):
        return block.strip()
    if isinstance(block, dict):
        return str(block.get("text") or "").strip()
    return ""
