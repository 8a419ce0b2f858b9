"""API response models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from cutplanner.history.store import EntrySummary
from cutplanner.models.layout import HistoryEntry, Layout, Piece


class _CamelResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"


class ValidateResponse(BaseModel):
    value: float | None = None
    error: str | None = None


class CalculateResponse(_CamelResponse):
    state: str
    error: str | None = None
    field_errors: dict[str, str] = Field(default_factory=dict)
    layout: Layout | None = None
    unplaced_pieces: list[Piece] = Field(default_factory=list)
    entry: HistoryEntry | None = None


class HistoryItem(_CamelResponse):
    entry: HistoryEntry
    summary: EntrySummary


class HistoryListResponse(_CamelResponse):
    entries: list[HistoryItem] = Field(default_factory=list)
    count: int = 0


class EditPieceFields(BaseModel):
    id: str
    width: str
    height: str


class EditFormResponse(_CamelResponse):
    entry_id: str
    board: dict[str, str]
    pieces: list[EditPieceFields] = Field(default_factory=list)


class DiagramResponse(_CamelResponse):
    svg: str
    selected: dict | None = None
    filename: str = "layout-plan.svg"
