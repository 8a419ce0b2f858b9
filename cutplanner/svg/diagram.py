"""Cutting diagram: board outline plus placed pieces, to scale.

The viewBox is the board itself, so one SVG unit is one board unit. With no
pieces the board is drawn alone as a preview.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel

from cutplanner.models.layout import Board, PlacedPiece
from cutplanner.svg.serializer import serialize_svg
from cutplanner.utils.dimensions import format_dimension

logger = logging.getLogger(__name__)

EXPORT_FILENAME = "layout-plan.svg"
PNG_EXPORT_FILENAME = "layout-plan.png"

BOARD_FILL = "#374151"
SELECTED_STROKE = "#34d399"


class PieceMetrics(BaseModel):
    id: str
    width: float
    height: float
    x: float
    y: float
    color: str
    position: str  # "(x, y)" with 2 decimals


def view_box(board: Board) -> tuple[float, float]:
    width = board.width if board.width > 0 else 100.0
    height = board.height if board.height > 0 else 100.0
    return width, height


def _round(value: float) -> float:
    return round(value, 4)


def select_piece(placed: list[PlacedPiece], piece_id: str | None) -> PlacedPiece | None:
    """Find the selected piece; a stale id (not in this layout) clears the selection."""
    if piece_id is None:
        return None
    for piece in placed:
        if piece.id == piece_id:
            return piece
    logger.debug("Selected piece %s is not in the layout", piece_id)
    return None


def piece_metrics(piece: PlacedPiece) -> PieceMetrics:
    return PieceMetrics(
        id=piece.id,
        width=piece.width,
        height=piece.height,
        x=piece.x,
        y=piece.y,
        color=piece.color,
        position=f"({piece.x:.2f}, {piece.y:.2f})",
    )


def build_diagram_elements(
    board: Board,
    placed: list[PlacedPiece],
    selected_id: str | None = None,
) -> list[dict[str, Any]]:
    vb_w, vb_h = view_box(board)
    stroke = min(vb_w, vb_h) * 0.005
    label_offset = _round(stroke * 5)
    label_size = _round(stroke * 4)

    elements: list[dict[str, Any]] = [
        {"tag": "rect", "width": board.width, "height": board.height, "fill": BOARD_FILL},
        {
            "tag": "text",
            "x": _round(board.width / 2),
            "y": label_offset,
            "text-anchor": "middle",
            "fill": "white",
            "font-size": label_size,
            "text": format_dimension(board.width),
        },
        {
            "tag": "text",
            "x": label_offset,
            "y": _round(board.height / 2),
            "text-anchor": "middle",
            "fill": "white",
            "font-size": label_size,
            "transform": f"rotate(-90 {label_offset:g},{board.height / 2:g})",
            "text": format_dimension(board.height),
        },
    ]

    for piece in placed:
        selected = piece.id == selected_id
        cx = piece.x + piece.width / 2
        cy = piece.y + piece.height / 2
        rect: dict[str, Any] = {
            "tag": "rect",
            "x": piece.x,
            "y": piece.y,
            "width": piece.width,
            "height": piece.height,
            "fill": piece.color,
            "stroke": SELECTED_STROKE if selected else "black",
            "stroke-width": _round(stroke * 2 if selected else stroke),
        }
        if selected:
            # Grow 2% about the piece centre
            rect["transform"] = f"translate({cx:g} {cy:g}) scale(1.02) translate({-cx:g} {-cy:g})"
        elements.append({
            "tag": "g",
            "id": f"piece-{piece.id}",
            "class": "piece selected" if selected else "piece",
            "children": [
                rect,
                {
                    "tag": "text",
                    "x": _round(cx),
                    "y": _round(cy),
                    "text-anchor": "middle",
                    "dy": ".3em",
                    "fill": "black",
                    "font-family": "monospace",
                    "font-size": _round(min(piece.width, piece.height) * 0.2),
                    "text": f"{format_dimension(piece.width)}x{format_dimension(piece.height)}",
                },
            ],
        })

    return elements


def render_diagram(
    board: Board,
    placed: list[PlacedPiece],
    selected_id: str | None = None,
) -> str:
    """Standalone SVG document for the board and its placed pieces."""
    selected = select_piece(placed, selected_id)
    vb_w, vb_h = view_box(board)
    title = "Board preview" if not placed else "Cutting plan"
    return serialize_svg(
        build_diagram_elements(board, placed, selected.id if selected else None),
        canvas_w=vb_w,
        canvas_h=vb_h,
        title=title,
        element_id="layout-svg",
    )


def render_png(svg: str, width: int = 1024) -> bytes:
    """Rasterize a diagram with cairosvg."""
    import cairosvg

    try:
        return cairosvg.svg2png(bytestring=svg.encode("utf-8"), output_width=width)
    except Exception as e:
        logger.warning("Failed to render diagram to PNG: %s", e)
        raise
