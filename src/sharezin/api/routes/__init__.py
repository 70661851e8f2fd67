"""API v1 router registration."""

from fastapi import APIRouter

from sharezin.api.routes import (
    groups,
    items,
    notifications,
    participants,
    receipts,
)

v1_router = APIRouter(prefix="/v1")
v1_router.include_router(receipts.router)
v1_router.include_router(participants.router)
v1_router.include_router(items.router)
v1_router.include_router(groups.router)
v1_router.include_router(notifications.router)
