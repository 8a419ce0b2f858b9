"""Shared test fixtures."""

from __future__ import annotations

import json

import pytest
from langchain_core.messages import AIMessage

from cutplanner.history.store import HistoryStore, InMemoryBackend
from cutplanner.models.layout import Board, OracleLayout, Piece


BOARD = Board(width=100, height=100)

PIECE_A = Piece(id="piece-a", width=20, height=30)
PIECE_B = Piece(id="piece-b", width=50, height=50)
PIECE_C = Piece(id="piece-c", width=200, height=10)


def oracle_reply(placed: list[tuple[str, float, float]], unplaced: list[str] | None = None) -> str:
    """Layout service JSON, as the chat model would answer."""
    return json.dumps({
        "placedPieces": [{"id": i, "x": x, "y": y} for i, x, y in placed],
        "unplacedPieces": [{"id": i} for i in unplaced or []],
    })


class StubOracle:
    """LayoutOracle returning a canned answer (or raising) and recording calls."""

    def __init__(self, result: OracleLayout | None = None, error: Exception | None = None) -> None:
        self.result = result
        self.error = error
        self.calls: list[tuple[Board, list[Piece]]] = []

    async def request_layout(self, board: Board, pieces: list[Piece]) -> OracleLayout:
        self.calls.append((board, list(pieces)))
        if self.error is not None:
            raise self.error
        return self.result or OracleLayout(placed_pieces=[], unplaced_pieces=[])


class RecordingChatModel:
    """Stands in for ChatAnthropic: records messages, replies with fixed text."""

    def __init__(self, reply: str = "", error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.calls: list[list] = []

    async def ainvoke(self, messages):
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        return AIMessage(content=self.reply)


@pytest.fixture
def backend() -> InMemoryBackend:
    return InMemoryBackend()


@pytest.fixture
def store(backend: InMemoryBackend) -> HistoryStore:
    return HistoryStore(backend)
