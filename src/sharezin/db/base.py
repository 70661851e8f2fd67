"""SQLAlchemy base metadata and model registration utilities."""

from importlib import import_module

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for ORM models."""


def import_orm_models() -> None:
    """Import ORM models so metadata is fully populated."""

    modules = (
        "sharezin.db.models.receipt",
        "sharezin.db.models.participant",
        "sharezin.db.models.receipt_item",
        "sharezin.db.models.pending_participant",
        "sharezin.db.models.deletion_request",
        "sharezin.db.models.group",
        "sharezin.db.models.notification",
    )
    for module_name in modules:
        import_module(module_name)
