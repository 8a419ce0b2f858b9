"""Tests for the layout oracle client (no network, the chat model is faked)."""

from __future__ import annotations

import asyncio

import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from langchain_core.messages import HumanMessage, SystemMessage

from tests.conftest import BOARD, PIECE_A, PIECE_B, RecordingChatModel, oracle_reply

from cutplanner.config import Settings
from cutplanner.llm.client import (
    InvalidLayoutError,
    LayoutServiceError,
    LLMLayoutOracle,
    MissingCredentialsError,
    parse_layout_response,
)
from cutplanner.llm.prompts import build_layout_prompt, build_system_prompt


def _oracle(llm) -> LLMLayoutOracle:
    return LLMLayoutOracle(Settings(anthropic_api_key="test-key"), llm=llm)


def test_empty_pieces_short_circuit():
    llm = RecordingChatModel(reply="should not be used")
    result = asyncio.run(_oracle(llm).request_layout(BOARD, []))
    assert result.placed_pieces == []
    assert result.unplaced_pieces == []
    assert llm.calls == []


def test_empty_pieces_without_credentials():
    oracle = LLMLayoutOracle(Settings(anthropic_api_key=""))
    result = asyncio.run(oracle.request_layout(BOARD, []))
    assert result.placed_pieces == []


def test_missing_credentials():
    oracle = LLMLayoutOracle(Settings(anthropic_api_key=""))
    with pytest.raises(MissingCredentialsError):
        asyncio.run(oracle.request_layout(BOARD, [PIECE_A]))


def test_parses_fake_model_reply():
    llm = FakeListChatModel(responses=[oracle_reply([("piece-a", 0, 0)], ["piece-b"])])
    result = asyncio.run(_oracle(llm).request_layout(BOARD, [PIECE_A, PIECE_B]))
    assert [(p.id, p.x, p.y) for p in result.placed_pieces] == [("piece-a", 0, 0)]
    assert [r.id for r in result.unplaced_pieces] == ["piece-b"]


def test_sends_instruction_and_description():
    llm = RecordingChatModel(reply=oracle_reply([("piece-a", 0, 0)]))
    asyncio.run(_oracle(llm).request_layout(BOARD, [PIECE_A]))

    (messages,) = llm.calls
    system, human = messages
    assert isinstance(system, SystemMessage)
    assert isinstance(human, HumanMessage)
    assert "Do NOT rotate" in system.content
    assert "top-left" in system.content
    assert "placedPieces" in system.content
    assert "- ID: piece-a, Width: 20, Height: 30" in human.content
    assert "- Width: 100" in human.content


def test_transport_failure_is_wrapped():
    llm = RecordingChatModel(error=ConnectionError("connection reset"))
    with pytest.raises(LayoutServiceError, match="connection reset"):
        asyncio.run(_oracle(llm).request_layout(BOARD, [PIECE_A]))


def test_malformed_reply_is_invalid_layout():
    llm = RecordingChatModel(reply="I could not place these pieces.")
    with pytest.raises(InvalidLayoutError):
        asyncio.run(_oracle(llm).request_layout(BOARD, [PIECE_A]))


def test_content_blocks_are_joined():
    reply = oracle_reply([("piece-a", 5, 5)])
    llm = RecordingChatModel()
    llm.reply = [{"type": "text", "text": reply}]
    result = asyncio.run(_oracle(llm).request_layout(BOARD, [PIECE_A]))
    assert result.placed_pieces[0].x == 5


class TestParseLayoutResponse:
    def test_code_fence(self):
        text = "```json\n" + oracle_reply([("piece-a", 1, 2)]) + "\n```"
        assert parse_layout_response(text).placed_pieces[0].y == 2

    def test_single_line_code_fence(self):
        text = "```json " + oracle_reply([("piece-a", 1, 2)]) + " ```"
        assert parse_layout_response(text).placed_pieces[0].x == 1

    def test_missing_key(self):
        with pytest.raises(InvalidLayoutError):
            parse_layout_response('{"placedPieces": []}')

    def test_wrong_types(self):
        with pytest.raises(InvalidLayoutError):
            parse_layout_response('{"placedPieces": [{"id": "a", "x": "left"}], "unplacedPieces": []}')

    def test_empty_text(self):
        with pytest.raises(InvalidLayoutError):
            parse_layout_response("")


def test_prompt_builders_are_stable():
    assert build_system_prompt() == build_system_prompt()
    prompt = build_layout_prompt(BOARD, [PIECE_A, PIECE_B])
    assert prompt.index("piece-a") < prompt.index("piece-b")
