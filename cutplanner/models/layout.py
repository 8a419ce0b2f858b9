"""Board, piece and layout data model, shared by the workflow, history and API.

Field names serialize in camelCase (``placedPieces``) so persisted history
and the HTTP payloads keep one wire format.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Board(_CamelModel):
    """Stock rectangle. Origin top-left, x grows right, y grows down."""

    width: float
    height: float

    @property
    def area(self) -> float:
        return self.width * self.height


class Piece(_CamelModel):
    id: str
    width: float
    height: float

    @property
    def area(self) -> float:
        return self.width * self.height


class PlacedPiece(Piece):
    x: float
    y: float
    color: str


class Layout(_CamelModel):
    placed_pieces: list[PlacedPiece] = Field(default_factory=list)
    unplaced_pieces: list[Piece] = Field(default_factory=list)


class HistoryEntry(_CamelModel):
    id: str
    timestamp: str  # ISO-8601, UTC
    board: Board
    pieces: list[Piece] = Field(default_factory=list)
    layout: Layout = Field(default_factory=Layout)


class NewHistoryEntry(_CamelModel):
    """A HistoryEntry before the store assigns id and timestamp."""

    board: Board
    pieces: list[Piece] = Field(default_factory=list)
    layout: Layout = Field(default_factory=Layout)


# Layout service wire format: ids only, dimensions are never echoed back


class OraclePlacement(_CamelModel):
    id: str
    x: float
    y: float


class OracleRef(_CamelModel):
    id: str


class OracleLayout(_CamelModel):
    placed_pieces: list[OraclePlacement]
    unplaced_pieces: list[OracleRef]
