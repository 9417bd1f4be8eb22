"""Pydantic request/response models for the HTTP API.

WHY: The FastAPI endpoints need typed schemas for request validation,
response serialization, and automatic OpenAPI documentation.

HOW: One request model (tokenize) and response models mirroring the
engine's dataclasses. Field names are snake_case; the persisted
camelCase form stays inside the storage layer.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- Timing overrides are passed through as a free-form mapping; unknown
  keys are ignored and bad values fall back to defaults, never a 422
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class TokenizeRequest(BaseModel):
    text: str = Field(description="Raw text to split into timed units.")
    timing: Optional[Dict[str, Any]] = Field(
        default=None,
        description=(
            "Partial timing configuration, e.g. {\"wpm\": 300, "
            "\"adaptiveTiming\": false}. Missing keys use the defaults."
        ),
    )


class UnitModel(BaseModel):
    text: str = Field(description="The word, including trailing punctuation.")
    index: int = Field(description="Position in the unit sequence.")
    duration_ms: int = Field(description="Display time in milliseconds.")
    orp_offset: int = Field(description="Character index of the recognition point.")


class TokenizeResponse(BaseModel):
    units: List[UnitModel] = Field(description="Timed units in reading order.")
    unit_count: int = Field(description="Number of units.")
    total_ms: int = Field(description="Sum of all unit durations.")
    timing: Dict[str, Any] = Field(description="Effective timing configuration.")


class BookStatisticsModel(BaseModel):
    total_words_read: int = Field(description="Words read in this book.")
    total_reading_time_ms: int = Field(description="Reading time in this book.")
    sessions_count: int = Field(description="Committed sessions for this book.")
    average_wpm: int = Field(description="Average speed, 0 when no time recorded.")


class SessionModel(BaseModel):
    book_name: str = Field(description="Book the session belongs to.")
    words_read: int = Field(description="Words read during the session.")
    reading_time_ms: int = Field(description="Time spent during the session.")
    timestamp: int = Field(description="Commit time, epoch milliseconds.")


class StatisticsResponse(BaseModel):
    total_words_read: int = Field(description="Words read across all books.")
    total_reading_time_ms: int = Field(description="Reading time across all books.")
    sessions_count: int = Field(description="Committed sessions across all books.")
    average_wpm: int = Field(description="Average speed, 0 when no time recorded.")
    books: Dict[str, BookStatisticsModel] = Field(description="Totals per book.")
    sessions: List[SessionModel] = Field(description="Recent sessions, newest first.")


class HealthResponse(BaseModel):
    status: str = Field(description="Always 'ok' when the service is up.")
    version: str = Field(description="Package version.")


class ErrorResponse(BaseModel):
    detail: str = Field(description="Human-readable error message.")
