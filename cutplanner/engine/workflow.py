"""Calculator workflow: form state, edit-from-history, and one submission at a time.

Submission states:
    IDLE → VALIDATING → (REJECTED | SUBMITTING) → (SUCCEEDED | FAILED)

REJECTED, SUCCEEDED and FAILED are resting states; the next ``submit()``
starts over from VALIDATING.
"""

from __future__ import annotations

import enum
import logging
import uuid
from dataclasses import dataclass, field

from cutplanner.engine.layout import find_layout_issues, merge_layout
from cutplanner.history.store import HistoryStore
from cutplanner.llm.client import (
    INVALID_LAYOUT_MESSAGE,
    InvalidLayoutError,
    LayoutOracle,
    LayoutServiceError,
)
from cutplanner.models.layout import Board, HistoryEntry, Layout, NewHistoryEntry, Piece
from cutplanner.utils.dimensions import format_dimension, parse_dimension, validate_input

logger = logging.getLogger(__name__)

FIX_ERRORS_MESSAGE = "Please fix the errors in the fields before continuing."
NON_POSITIVE_MESSAGE = "All dimensions must be greater than zero."

_DIMENSIONS = ("width", "height")


class WorkflowState(str, enum.Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    REJECTED = "rejected"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class WorkflowBusyError(RuntimeError):
    """submit() called while a previous submission is still in flight."""


def _new_id() -> str:
    return str(uuid.uuid4())


def board_field_key(name: str) -> str:
    return f"board-{name}"


def piece_field_key(piece_id: str, name: str) -> str:
    return f"piece-{piece_id}-{name}"


def _check_dimension_name(name: str) -> None:
    if name not in _DIMENSIONS:
        raise ValueError(f"Unknown dimension field: {name!r}")


class EditCommand:
    """Board + pieces carried from a history entry into the calculator form.

    Single use: the first ``take()`` hands out the payload, later calls get None.
    """

    def __init__(self, board: Board, pieces: list[Piece]) -> None:
        self.board = board
        self.pieces = list(pieces)
        self.consumed = False

    @classmethod
    def from_entry(cls, entry: HistoryEntry) -> EditCommand:
        return cls(board=entry.board, pieces=entry.pieces)

    def take(self) -> tuple[Board, list[Piece]] | None:
        if self.consumed:
            return None
        self.consumed = True
        return self.board, self.pieces


@dataclass
class PieceFields:
    """Raw text of one piece row."""

    id: str
    width: str
    height: str


class CalculatorForm:
    """Text fields, their last valid numbers, and live validation errors.

    A field edit always stores the text; the numeric value only follows when
    the text validates, so a bad edit keeps the previous number.
    """

    def __init__(self) -> None:
        first_id = _new_id()
        self.board = Board(width=100, height=100)
        self.pieces: list[Piece] = [Piece(id=first_id, width=20, height=30)]
        self.board_fields: dict[str, str] = {"width": "100", "height": "100"}
        self.piece_fields: list[PieceFields] = [PieceFields(first_id, "20", "30")]
        self.input_errors: dict[str, str | None] = {}

    @classmethod
    def from_fields(
        cls,
        board_width: str,
        board_height: str,
        pieces: list[tuple[str | None, str, str]],
    ) -> CalculatorForm:
        """Build a form as if the user typed every value in turn."""
        form = cls()
        form.pieces = []
        form.piece_fields = []
        form.set_board_field("width", board_width)
        form.set_board_field("height", board_height)
        for piece_id, width, height in pieces:
            if piece_id in {p.id for p in form.pieces}:
                piece_id = None
            piece = form.add_piece(piece_id)
            form.set_piece_field(piece.id, "width", width)
            form.set_piece_field(piece.id, "height", height)
        return form

    def set_board_field(self, name: str, value: str) -> str | None:
        _check_dimension_name(name)
        self.board_fields[name] = value
        error = validate_input(value)
        self.input_errors[board_field_key(name)] = error
        if error is None:
            self.board = self.board.model_copy(update={name: parse_dimension(value)})
        return error

    def set_piece_field(self, piece_id: str, name: str, value: str) -> str | None:
        _check_dimension_name(name)
        row = self._fields_for(piece_id)
        setattr(row, name, value)
        error = validate_input(value)
        self.input_errors[piece_field_key(piece_id, name)] = error
        if error is None:
            parsed = parse_dimension(value)
            self.pieces = [
                p.model_copy(update={name: parsed}) if p.id == piece_id else p
                for p in self.pieces
            ]
        return error

    def add_piece(self, piece_id: str | None = None) -> Piece:
        piece = Piece(id=piece_id or _new_id(), width=10, height=10)
        self.pieces.append(piece)
        self.piece_fields.append(PieceFields(piece.id, "10", "10"))
        return piece

    def remove_piece(self, piece_id: str) -> None:
        self.pieces = [p for p in self.pieces if p.id != piece_id]
        self.piece_fields = [f for f in self.piece_fields if f.id != piece_id]
        for name in _DIMENSIONS:
            self.input_errors.pop(piece_field_key(piece_id, name), None)

    def load(self, command: EditCommand) -> bool:
        """Pre-fill from a history entry. False if the command was already used."""
        payload = command.take()
        if payload is None:
            logger.debug("Edit command already consumed, form unchanged")
            return False
        board, pieces = payload
        self.board = board.model_copy()
        self.pieces = [p.model_copy() for p in pieces]
        self.board_fields = {
            "width": format_dimension(board.width),
            "height": format_dimension(board.height),
        }
        self.piece_fields = [
            PieceFields(p.id, format_dimension(p.width), format_dimension(p.height))
            for p in pieces
        ]
        self.input_errors = {}
        return True

    @property
    def field_errors(self) -> dict[str, str]:
        return {k: v for k, v in self.input_errors.items() if v is not None}

    def has_errors(self) -> bool:
        return bool(self.field_errors)

    def has_non_positive(self) -> bool:
        if self.board.width <= 0 or self.board.height <= 0:
            return True
        return any(p.width <= 0 or p.height <= 0 for p in self.pieces)

    def _fields_for(self, piece_id: str) -> PieceFields:
        for row in self.piece_fields:
            if row.id == piece_id:
                return row
        raise KeyError(piece_id)


@dataclass
class SubmissionResult:
    state: WorkflowState
    error: str | None = None
    layout: Layout | None = None
    entry: HistoryEntry | None = None
    field_errors: dict[str, str] = field(default_factory=dict)


class CalculatorWorkflow:
    """Runs a form submission through the layout oracle into the history."""

    def __init__(
        self,
        oracle: LayoutOracle,
        history: HistoryStore,
        form: CalculatorForm | None = None,
        edit_command: EditCommand | None = None,
        verify: bool = True,
    ) -> None:
        self.oracle = oracle
        self.history = history
        self.form = form or CalculatorForm()
        self.verify = verify
        self.state = WorkflowState.IDLE
        self.error: str | None = None
        self.layout: Layout | None = None
        self._busy = False
        if edit_command is not None:
            self.form.load(edit_command)

    @property
    def busy(self) -> bool:
        return self._busy

    async def submit(self) -> SubmissionResult:
        if self._busy:
            raise WorkflowBusyError("A calculation is already in progress.")
        self._busy = True
        try:
            return await self._run()
        finally:
            self._busy = False

    async def _run(self) -> SubmissionResult:
        self.state = WorkflowState.VALIDATING
        self.error = None

        if self.form.has_errors():
            return self._reject(FIX_ERRORS_MESSAGE)
        self.layout = None
        if self.form.has_non_positive():
            return self._reject(NON_POSITIVE_MESSAGE)

        self.state = WorkflowState.SUBMITTING
        board = self.form.board
        pieces = list(self.form.pieces)
        logger.info("Submitting %d pieces for a %gx%g board", len(pieces), board.width, board.height)

        try:
            try:
                result = await self.oracle.request_layout(board, pieces)
            except LayoutServiceError:
                raise
            except Exception as e:
                raise LayoutServiceError(f"Layout service request failed: {e}") from e
            layout = merge_layout(pieces, result)
            if self.verify:
                issues = find_layout_issues(board, layout.placed_pieces)
                if issues:
                    logger.warning("Rejecting layout: %s", "; ".join(issues))
                    raise InvalidLayoutError(f"{INVALID_LAYOUT_MESSAGE} {'; '.join(issues)}")
        except LayoutServiceError as e:
            self.state = WorkflowState.FAILED
            self.error = str(e)
            logger.warning("Calculation failed: %s", e)
            return SubmissionResult(state=self.state, error=self.error)

        entry = self.history.add(NewHistoryEntry(board=board, pieces=pieces, layout=layout))
        self.layout = layout
        self.state = WorkflowState.SUCCEEDED
        return SubmissionResult(state=self.state, layout=layout, entry=entry)

    def _reject(self, message: str) -> SubmissionResult:
        self.state = WorkflowState.REJECTED
        self.error = message
        return SubmissionResult(
            state=self.state,
            error=message,
            field_errors=self.form.field_errors,
        )
