"""Cut Planner calculation engine: layout merge, verification and the calculator workflow."""

from cutplanner.engine.layout import PIECE_COLORS, find_layout_issues, merge_layout
from cutplanner.engine.workflow import (
    CalculatorForm,
    CalculatorWorkflow,
    EditCommand,
    WorkflowBusyError,
    WorkflowState,
)

__all__ = [
    "PIECE_COLORS",
    "find_layout_issues",
    "merge_layout",
    "CalculatorForm",
    "CalculatorWorkflow",
    "EditCommand",
    "WorkflowBusyError",
    "WorkflowState",
]
