"""FastAPI application exposing the tokenizer and saved statistics.

WHY: Other tools (a web page, an e-reader plugin, a script) may want the
timed word sequence without embedding Python, and may want to show the
statistics the desktop reader has collected.

HOW: ``create_app()`` builds a FastAPI app around a StateStore held on
``app.state.store``. POST /tokenize runs the tokenizer with optional
timing overrides; GET /statistics reads the store; GET /config/defaults
returns the default timing configuration; GET /health reports liveness.

RULES:
- Empty or whitespace-only text returns an empty unit list, not an error
- Text above MAX_TEXT_CHARS is rejected with 413
- The module-level ``app`` uses the JSON state file from config
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request

from rsvp_reader import __version__
from rsvp_reader.config import DEFAULT_STATE_PATH
from rsvp_reader.core.tokenizer import tokenize
from rsvp_reader.core.units import DEFAULT_TIMING_CONFIGURATION, TimingConfiguration
from rsvp_reader.server.models import (
    BookStatisticsModel,
    ErrorResponse,
    HealthResponse,
    SessionModel,
    StatisticsResponse,
    TokenizeRequest,
    TokenizeResponse,
    UnitModel,
)
from rsvp_reader.storage import JsonFileStore, StateStore

logger = logging.getLogger(__name__)

MAX_TEXT_CHARS = 5_000_000


def create_app(store: Optional[StateStore] = None) -> FastAPI:
    """Build the API app around ``store`` (default: the JSON state file)."""
    app = FastAPI(
        title="RSVP Reader API",
        description=(
            "Tokenize text into timed RSVP units and read the statistics "
            "collected by the reader."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.store = store if store is not None else JsonFileStore(DEFAULT_STATE_PATH)

    @app.post(
        "/tokenize",
        response_model=TokenizeResponse,
        tags=["reading"],
        summary="Tokenize text into timed units",
        description=(
            "Split text into words with display durations and recognition "
            "points, using the default timing configuration merged with "
            "any overrides."
        ),
        responses={413: {"model": ErrorResponse, "description": "Text too large"}},
    )
    def tokenize_text(body: TokenizeRequest) -> TokenizeResponse:
        if len(body.text) > MAX_TEXT_CHARS:
            raise HTTPException(
                status_code=413,
                detail="Text exceeds {} characters".format(MAX_TEXT_CHARS),
            )
        config = TimingConfiguration.from_dict(body.timing)
        units = tokenize(body.text, config)
        logger.debug("Tokenized %d characters into %d units", len(body.text), len(units))
        return TokenizeResponse(
            units=[UnitModel(**unit.to_dict()) for unit in units],
            unit_count=len(units),
            total_ms=sum(unit.duration_ms for unit in units),
            timing=config.to_dict(),
        )

    @app.get(
        "/statistics",
        response_model=StatisticsResponse,
        tags=["statistics"],
        summary="Saved reading statistics",
        description="Global totals, per-book totals and the recent session history.",
    )
    def get_statistics(request: Request) -> StatisticsResponse:
        stats = request.app.state.store.load_statistics()
        return StatisticsResponse(
            total_words_read=stats.total_words_read,
            total_reading_time_ms=stats.total_reading_time_ms,
            sessions_count=stats.sessions_count,
            average_wpm=stats.average_wpm,
            books={
                name: BookStatisticsModel(
                    total_words_read=book.total_words_read,
                    total_reading_time_ms=book.total_reading_time_ms,
                    sessions_count=book.sessions_count,
                    average_wpm=book.average_wpm,
                )
                for name, book in stats.books.items()
            },
            sessions=[
                SessionModel(
                    book_name=session.book_name,
                    words_read=session.words_read,
                    reading_time_ms=session.reading_time_ms,
                    timestamp=session.timestamp,
                )
                for session in stats.sessions
            ],
        )

    @app.get(
        "/config/defaults",
        tags=["reading"],
        summary="Default timing configuration",
        description="The timing configuration used when no overrides are given.",
    )
    def get_default_config() -> Dict[str, Any]:
        return DEFAULT_TIMING_CONFIGURATION.to_dict()

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["health"],
        summary="Health check",
        description="Returns ok when the service is running.",
    )
    def health() -> HealthResponse:
        return HealthResponse(status="ok", version=__version__)

    return app


app = create_app()


def main() -> None:
    """Serve the API with uvicorn (RSVP_API_HOST / RSVP_API_PORT)."""
    import uvicorn

    uvicorn.run(
        app,
        host=os.getenv("RSVP_API_HOST", "127.0.0.1"),
        port=int(os.getenv("RSVP_API_PORT", "8000")),
    )


if __name__ == "__main__":
    main()
