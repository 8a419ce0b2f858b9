"""FastAPI dependency injection."""

from __future__ import annotations

from cutplanner.config import settings
from cutplanner.history.store import HistoryStore, get_history_store
from cutplanner.llm.client import LayoutOracle, LLMLayoutOracle


def get_settings():
    return settings


def get_store() -> HistoryStore:
    return get_history_store()


def get_oracle() -> LayoutOracle:
    return LLMLayoutOracle(settings)
