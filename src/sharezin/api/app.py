"""FastAPI app bootstrap for sharezin."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, HTTPException, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sharezin.api.error_handlers import register_error_handlers
from sharezin.api.routes import v1_router
from sharezin.db.session import get_db_session
from sharezin.notifications.dispatcher import NotificationDispatcher


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Own the notification dispatcher for the lifetime of the app."""

    dispatcher: NotificationDispatcher = app.state.notification_dispatcher
    dispatcher.start()
    try:
        yield
    finally:
        dispatcher.stop()


def create_app(dispatcher: NotificationDispatcher | None = None) -> FastAPI:
    """Create and configure FastAPI application instance."""

    app = FastAPI(
        title="Sharezin API",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.notification_dispatcher = dispatcher or NotificationDispatcher()

    @app.get("/health/live", include_in_schema=False)
    def health_live() -> dict[str, str]:
        return {"status": "alive"}

    @app.get("/health/ready", include_in_schema=False)
    def health_ready(
        db_session: Annotated[Session, Depends(get_db_session)],
    ) -> dict[str, str]:
        try:
            db_session.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Database is unavailable",
            ) from exc
        return {"status": "ready"}

    register_error_handlers(app)
    app.include_router(v1_router)
    return app


app = create_app()
