"""Turn a layout-service answer into a Layout, and check it geometrically."""

from __future__ import annotations

import logging

from shapely.geometry import box

from cutplanner.models.layout import Board, Layout, OracleLayout, Piece, PlacedPiece
from cutplanner.utils.dimensions import format_dimension

logger = logging.getLogger(__name__)

PIECE_COLORS = [
    "#f87171", "#fb923c", "#facc15", "#a3e635", "#4ade80",
    "#34d399", "#2dd4bf", "#60a5fa", "#a78bfa", "#f472b6",
]

# Absorbs float noise in coordinates echoed back by the service
_TOLERANCE = 1e-6


def piece_color(index: int) -> str:
    return PIECE_COLORS[index % len(PIECE_COLORS)]


def merge_layout(pieces: list[Piece], result: OracleLayout) -> Layout:
    """Re-attach dimensions to the service's ids and colour placed pieces.

    Every submitted piece ends up in exactly one list: unknown and repeated
    ids are dropped, ids reported as both keep their placement, and pieces
    the service never mentioned count as unplaced.
    """
    by_id = {p.id: p for p in pieces}
    seen: set[str] = set()

    placed: list[PlacedPiece] = []
    for placement in result.placed_pieces:
        original = by_id.get(placement.id)
        if original is None:
            logger.warning("Layout service placed unknown piece %s", placement.id)
            continue
        if placement.id in seen:
            logger.warning("Layout service placed piece %s twice", placement.id)
            continue
        seen.add(placement.id)
        placed.append(
            PlacedPiece(
                id=original.id,
                width=original.width,
                height=original.height,
                x=placement.x,
                y=placement.y,
                color=piece_color(len(placed)),
            )
        )

    unplaced: list[Piece] = []
    for ref in result.unplaced_pieces:
        original = by_id.get(ref.id)
        if original is None or ref.id in seen:
            continue
        seen.add(ref.id)
        unplaced.append(original)

    missing = [p for p in pieces if p.id not in seen]
    if missing:
        logger.warning("Layout service omitted %d pieces; marking unplaced", len(missing))
        unplaced.extend(missing)

    return Layout(placed_pieces=placed, unplaced_pieces=unplaced)


def _label(piece: PlacedPiece) -> str:
    return f"{format_dimension(piece.width)}x{format_dimension(piece.height)} at ({piece.x:g}, {piece.y:g})"


def find_layout_issues(board: Board, placed: list[PlacedPiece]) -> list[str]:
    """Out-of-bounds and overlapping placements; shared edges are fine."""
    issues: list[str] = []
    sheet = box(
        -_TOLERANCE, -_TOLERANCE, board.width + _TOLERANCE, board.height + _TOLERANCE
    )

    rects = []
    for piece in placed:
        rect = box(piece.x, piece.y, piece.x + piece.width, piece.y + piece.height)
        if not sheet.contains(rect):
            issues.append(f"Piece {_label(piece)} extends outside the board")
        rects.append(rect)

    for i in range(len(placed)):
        for j in range(i + 1, len(placed)):
            if rects[i].intersection(rects[j]).area > _TOLERANCE:
                issues.append(f"Pieces {_label(placed[i])} and {_label(placed[j])} overlap")

    return issues
