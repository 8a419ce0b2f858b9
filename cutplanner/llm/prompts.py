"""Layout service prompts — system instruction + board/piece description."""

from __future__ import annotations

import json

from cutplanner.models.layout import Board, OracleLayout, Piece
from cutplanner.utils.dimensions import format_dimension

LAYOUT_SYSTEM_PROMPT = """You are an expert in 2D bin packing and layout optimization. Your task is to place a list of smaller rectangular pieces onto a larger rectangular board, minimizing waste and trying to fit as many pieces as possible.
- The origin (0,0) is the top-left corner of the board.
- Do NOT rotate any pieces; place them with the exact width and height provided.
- Pieces cannot overlap.
- Pieces must be placed entirely within the board's boundaries.
- Provide the coordinates (x, y) for the top-left corner of each placed piece.
- Every piece ID must appear exactly once, either in placedPieces or in unplacedPieces.

Respond with ONLY a JSON object matching this schema. Do NOT wrap it in markdown code fences.
{schema}"""


def layout_schema() -> str:
    return json.dumps(OracleLayout.model_json_schema(by_alias=True), indent=2)


def build_system_prompt() -> str:
    return LAYOUT_SYSTEM_PROMPT.format(schema=layout_schema())


def build_layout_prompt(board: Board, pieces: list[Piece]) -> str:
    piece_lines = "\n".join(
        f"- ID: {p.id}, Width: {format_dimension(p.width)}, Height: {format_dimension(p.height)}"
        for p in pieces
    )
    return (
        "Board dimensions:\n"
        f"- Width: {format_dimension(board.width)}\n"
        f"- Height: {format_dimension(board.height)}\n"
        "\n"
        "Pieces to place:\n"
        f"{piece_lines}\n"
        "\n"
        "Calculate the optimal layout and provide the JSON output."
    )
