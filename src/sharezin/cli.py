"""CLI bootstrap for sharezin."""

from __future__ import annotations

import json
from datetime import datetime
from decimal import Decimal
from pathlib import Path

import typer
from pydantic import BaseModel, Field, ValidationError, model_validator

from sharezin.core.settings import get_settings
from sharezin.domain.allocation import participant_breakdown
from sharezin.domain.invite_code import generate_invite_code
from sharezin.domain.money import format_money, receipt_total
from sharezin.domain.receipt import (
    ItemSnapshot,
    ParticipantSnapshot,
    ReceiptSnapshot,
    new_id,
    resolve_now,
)

app = typer.Typer(help="CLI for splitting shared receipts.")
INPUT_FILE_ARGUMENT = typer.Argument(..., exists=True, dir_okay=False)


class SplitParticipant(BaseModel):
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)


class SplitItem(BaseModel):
    name: str = Field(min_length=1)
    quantity: Decimal = Field(default=Decimal("1"), gt=0)
    price: Decimal = Field(ge=0)
    participant_id: str


class SplitRequest(BaseModel):
    """Receipt description accepted by the split command."""

    title: str = "receipt"
    service_charge_percent: Decimal = Field(default=Decimal("0"), ge=0, le=100)
    cover: Decimal = Field(default=Decimal("0"), ge=0)
    participants: list[SplitParticipant] = Field(default_factory=list)
    items: list[SplitItem] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_unique_participants(self) -> SplitRequest:
        seen: set[str] = set()
        for participant in self.participants:
            if participant.id in seen:
                raise ValueError(f"Duplicate participant id: {participant.id}.")
            seen.add(participant.id)
        return self

    def to_snapshot(self, now: datetime | None = None) -> ReceiptSnapshot:
        added_at = resolve_now(now)
        return ReceiptSnapshot(
            id=new_id(),
            title=self.title,
            date=added_at,
            creator_id="cli",
            invite_code="",
            service_charge_percent=self.service_charge_percent,
            cover=self.cover,
            participants=tuple(
                ParticipantSnapshot(id=p.id, name=p.name) for p in self.participants
            ),
            items=tuple(
                ItemSnapshot(
                    id=new_id(),
                    name=item.name,
                    quantity=item.quantity,
                    price=item.price,
                    participant_id=item.participant_id,
                    added_at=added_at,
                )
                for item in self.items
            ),
        )


@app.command("healthcheck")
def healthcheck() -> None:
    """Verify that the CLI entrypoint is available."""
    typer.echo("sharezin is ready")


@app.command("split")
def split(input: Path = INPUT_FILE_ARGUMENT) -> None:
    """Print what every participant owes for a receipt in a JSON file."""
    try:
        request = SplitRequest.model_validate(
            json.loads(input.read_text(encoding="utf-8"))
        )
    except (json.JSONDecodeError, ValidationError) as exc:
        typer.echo(f"Invalid receipt file: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    receipt = request.to_snapshot()
    names = {participant.id: participant.name for participant in receipt.participants}
    typer.echo(f"Receipt: {receipt.title}")
    for participant_id, share in participant_breakdown(receipt).items():
        typer.echo(
            f"{names[participant_id]}: {format_money(share.total)} "
            f"(items {format_money(share.items_subtotal)} | "
            f"service {format_money(share.service_charge)} | "
            f"cover {format_money(share.cover)})"
        )
    typer.echo(f"Total: {format_money(receipt_total(receipt))}")


@app.command("invite-code")
def invite_code(
    length: int | None = typer.Option(None, min=1, help="Code length."),
) -> None:
    """Print a freshly generated invite code."""
    typer.echo(generate_invite_code(length or get_settings().invite_code_length))


def main() -> None:
    """Run the sharezin CLI application."""
    app()


if __name__ == "__main__":
    main()
