"""Cutting diagram rendering + file export."""

from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from cutplanner.dependencies import get_store
from cutplanner.history.store import HistoryStore
from cutplanner.models.requests import DiagramRequest
from cutplanner.models.responses import DiagramResponse
from cutplanner.svg.diagram import (
    EXPORT_FILENAME,
    PNG_EXPORT_FILENAME,
    piece_metrics,
    render_diagram,
    render_png,
    select_piece,
)

router = APIRouter()


@router.post("/diagram", response_model=DiagramResponse)
async def diagram(req: DiagramRequest) -> DiagramResponse:
    selected = select_piece(req.placed_pieces, req.selected_id)
    return DiagramResponse(
        svg=render_diagram(req.board, req.placed_pieces, req.selected_id),
        selected=piece_metrics(selected).model_dump() if selected else None,
        filename=EXPORT_FILENAME,
    )


@router.get("/history/{entry_id}/diagram")
async def export_diagram(
    entry_id: str,
    format: Literal["svg", "png"] = "svg",
    store: HistoryStore = Depends(get_store),
) -> Response:
    entry = store.get(entry_id)
    if entry is None:
        raise HTTPException(status_code=404, detail=f"History entry {entry_id} not found")

    svg = render_diagram(entry.board, entry.layout.placed_pieces)
    if format == "png":
        return Response(
            content=render_png(svg),
            media_type="image/png",
            headers={"Content-Disposition": f'attachment; filename="{PNG_EXPORT_FILENAME}"'},
        )
    return Response(
        content=svg,
        media_type="image/svg+xml",
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
    )
