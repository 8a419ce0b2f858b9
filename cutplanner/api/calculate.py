"""POST /api/validate and /api/calculate."""

from __future__ import annotations

import math

from fastapi import APIRouter, Depends

from cutplanner.config import Settings
from cutplanner.dependencies import get_oracle, get_settings, get_store
from cutplanner.engine.workflow import CalculatorForm, CalculatorWorkflow
from cutplanner.history.store import HistoryStore
from cutplanner.llm.client import LayoutOracle
from cutplanner.models.requests import CalculateRequest, ValidateRequest
from cutplanner.models.responses import CalculateResponse, ValidateResponse
from cutplanner.utils.dimensions import parse_dimension, validate_input

router = APIRouter()


@router.post("/validate", response_model=ValidateResponse)
async def validate(req: ValidateRequest) -> ValidateResponse:
    """Live field check, as the form runs it on every keystroke."""
    error = validate_input(req.text)
    if error is not None:
        return ValidateResponse(error=error)
    value = parse_dimension(req.text)
    return ValidateResponse(value=None if math.isnan(value) else value)


@router.post("/calculate", response_model=CalculateResponse)
async def calculate(
    req: CalculateRequest,
    oracle: LayoutOracle = Depends(get_oracle),
    store: HistoryStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> CalculateResponse:
    form = CalculatorForm.from_fields(
        req.board.width,
        req.board.height,
        [(p.id, p.width, p.height) for p in req.pieces],
    )
    workflow = CalculatorWorkflow(oracle, store, form=form, verify=settings.verify_layout)
    result = await workflow.submit()

    return CalculateResponse(
        state=result.state.value,
        error=result.error,
        field_errors=result.field_errors,
        layout=result.layout,
        unplaced_pieces=result.layout.unplaced_pieces if result.layout else [],
        entry=result.entry,
    )
