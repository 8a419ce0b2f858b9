"""Layout oracle — LangChain ChatAnthropic wrapper that asks for piece placements.

The oracle is a black box: it gets board + piece dimensions and answers with
ids and top-left coordinates. One call per request, no retry or caching.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Protocol

from pydantic import ValidationError

from cutplanner.config import Settings, settings as default_settings
from cutplanner.llm.prompts import build_layout_prompt, build_system_prompt
from cutplanner.models.layout import Board, OracleLayout, Piece

logger = logging.getLogger(__name__)


class LayoutServiceError(Exception):
    """The layout service could not produce a usable answer."""


class MissingCredentialsError(LayoutServiceError):
    pass


class InvalidLayoutError(LayoutServiceError):
    pass


INVALID_LAYOUT_MESSAGE = "Received an invalid layout from the layout service."


class LayoutOracle(Protocol):
    """Anything that can place pieces on a board.

    Implementations should report failures as ``LayoutServiceError``; the
    workflow wraps any other exception into one.
    """

    async def request_layout(self, board: Board, pieces: list[Piece]) -> OracleLayout: ...


def parse_layout_response(text: str) -> OracleLayout:
    """Decode the service reply; tolerates a surrounding ```json fence."""
    fenced = re.search(r"```(?:json)?\s*(.*?)\s*```", text, re.DOTALL)
    if fenced:
        text = fenced.group(1)
    try:
        return OracleLayout.model_validate_json(text.strip())
    except ValidationError as e:
        logger.error("Failed to parse layout response: %s", text)
        raise InvalidLayoutError(INVALID_LAYOUT_MESSAGE) from e


def _message_text(content: Any) -> str:
    if isinstance(content, str):
        return content
    # Content blocks: keep text, drop thinking / tool blocks
    parts = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


class LLMLayoutOracle:
    """Layout oracle backed by a chat model.

    ``llm`` is any LangChain chat model; by default a ChatAnthropic is built
    from settings on first use.
    """

    def __init__(self, settings: Settings | None = None, llm: Any | None = None) -> None:
        self.settings = settings or default_settings
        self._llm = llm

    def _get_llm(self) -> Any:
        if self._llm is not None:
            return self._llm
        if not self.settings.anthropic_api_key:
            raise MissingCredentialsError("API key is not configured. Set ANTHROPIC_API_KEY in .env")

        from langchain_anthropic import ChatAnthropic

        self._llm = ChatAnthropic(
            model=self.settings.model_layout,
            api_key=self.settings.anthropic_api_key,
            max_tokens=self.settings.layout_max_tokens,
        )
        return self._llm

    async def request_layout(self, board: Board, pieces: list[Piece]) -> OracleLayout:
        if not pieces:
            return OracleLayout(placed_pieces=[], unplaced_pieces=[])

        from langchain_core.messages import HumanMessage, SystemMessage

        llm = self._get_llm()
        messages = [
            SystemMessage(content=build_system_prompt()),
            HumanMessage(content=build_layout_prompt(board, pieces)),
        ]

        logger.info("Requesting layout for %d pieces on %gx%g board", len(pieces), board.width, board.height)
        try:
            response = await llm.ainvoke(messages)
        except Exception as e:
            raise LayoutServiceError(f"Layout service request failed: {e}") from e

        return parse_layout_response(_message_text(response.content))
