"""/api/history — list, replace, delete and re-open past calculations."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from cutplanner.dependencies import get_store
from cutplanner.engine.workflow import CalculatorForm, EditCommand
from cutplanner.history.store import HistoryStore, summarize_entry
from cutplanner.models.layout import HistoryEntry
from cutplanner.models.responses import (
    EditFormResponse,
    EditPieceFields,
    HistoryItem,
    HistoryListResponse,
)

router = APIRouter(prefix="/history")


def _require(store: HistoryStore, entry_id: str) -> HistoryEntry:
    entry = store.get(entry_id)
    if entry is None:
        raise HTTPException(status_code=404, detail=f"History entry {entry_id} not found")
    return entry


@router.get("", response_model=HistoryListResponse)
async def list_history(store: HistoryStore = Depends(get_store)) -> HistoryListResponse:
    items = [HistoryItem(entry=e, summary=summarize_entry(e)) for e in store.entries]
    return HistoryListResponse(entries=items, count=len(items))


@router.delete("", response_model=HistoryListResponse)
async def clear_history(store: HistoryStore = Depends(get_store)) -> HistoryListResponse:
    store.clear()
    return HistoryListResponse()


@router.get("/{entry_id}", response_model=HistoryItem)
async def get_entry(entry_id: str, store: HistoryStore = Depends(get_store)) -> HistoryItem:
    entry = _require(store, entry_id)
    return HistoryItem(entry=entry, summary=summarize_entry(entry))


@router.put("/{entry_id}", response_model=HistoryItem)
async def update_entry(
    entry_id: str,
    entry: HistoryEntry,
    store: HistoryStore = Depends(get_store),
) -> HistoryItem:
    replacement = entry.model_copy(update={"id": entry_id})
    if not store.update(replacement):
        raise HTTPException(status_code=404, detail=f"History entry {entry_id} not found")
    return HistoryItem(entry=replacement, summary=summarize_entry(replacement))


@router.delete("/{entry_id}", status_code=204)
async def remove_entry(entry_id: str, store: HistoryStore = Depends(get_store)) -> None:
    if not store.remove(entry_id):
        raise HTTPException(status_code=404, detail=f"History entry {entry_id} not found")


@router.get("/{entry_id}/edit", response_model=EditFormResponse)
async def edit_entry(entry_id: str, store: HistoryStore = Depends(get_store)) -> EditFormResponse:
    """Calculator fields pre-filled from an entry, ready to edit and resubmit."""
    entry = _require(store, entry_id)
    form = CalculatorForm()
    form.load(EditCommand.from_entry(entry))
    return EditFormResponse(
        entry_id=entry.id,
        board=dict(form.board_fields),
        pieces=[EditPieceFields(id=f.id, width=f.width, height=f.height) for f in form.piece_fields],
    )
