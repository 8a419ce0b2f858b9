"""API request models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from cutplanner.models.layout import Board, PlacedPiece


class ValidateRequest(BaseModel):
    text: str = Field(..., description="Dimension text as typed, e.g. '10 1/2'")


class BoardFields(BaseModel):
    width: str = Field(..., description="Board width text")
    height: str = Field(..., description="Board height text")


class PieceFieldsIn(BaseModel):
    id: str | None = Field(default=None, description="Stable piece id; generated when omitted")
    width: str = Field(..., description="Piece width text")
    height: str = Field(..., description="Piece height text")


class CalculateRequest(BaseModel):
    board: BoardFields
    pieces: list[PieceFieldsIn] = Field(default_factory=list)


class DiagramRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    board: Board
    placed_pieces: list[PlacedPiece] = Field(default_factory=list)
    selected_id: str | None = Field(default=None, description="Piece to highlight")
