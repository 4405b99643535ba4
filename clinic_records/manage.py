"""Management commands for the clinic records system."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from dataclasses import asdict
from typing import Any, Awaitable, Callable, TypeVar
from uuid import UUID

import click

from clinic_records.core import config
from clinic_records.core.exceptions import ClinicRecordsError
from clinic_records.core.logging_config import setup_logging
from clinic_records.db.session import (
    create_tables,
    dispose_engine,
    drop_tables,
    get_session,
)
from clinic_records.domain.entities import Prescription
from clinic_records.repositories.prescription_repo import PrescriptionRepository
from clinic_records.services.prescription_service import PrescriptionService

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _run(func: Callable[[], Awaitable[T]]) -> T:
    """Run one async command body and release the engine afterwards."""

    async def _main() -> T:
        try:
            return await func()
        finally:
            await dispose_engine()

    try:
        return asyncio.run(_main())
    except ClinicRecordsError as e:
        raise click.ClickException(e.message) from e


def _prescription_to_dict(prescription: Prescription) -> dict[str, Any]:
    data = asdict(prescription)
    data["is_filled"] = prescription.is_filled
    return data


def _echo_json(payload: Any) -> None:
    click.echo(json.dumps(payload, indent=2, default=str))


@click.group()
def cli() -> None:
    """Entry point for management commands."""
    setup_logging(
        log_level=config.get_log_level(),
        enable_sql_echo=config.get_sql_echo(),
        log_to_file=config.get_log_to_file(),
        use_json_format=config.get_log_json(),
        log_dir=config.get_log_dir(),
        stream=sys.stderr,
    )


@cli.command("init-db")
@click.option("--drop", is_flag=True, help="Drop existing tables before creating them.")
def init_db(drop: bool) -> None:
    """Create the database schema."""

    async def _init() -> None:
        if drop:
            await drop_tables()
        await create_tables()
        logger.info("Schema ready", extra={"context": {"dropped": drop}})

    _run(_init)
    click.echo("Database initialized.")


@cli.command("list-prescriptions")
@click.option("--page", type=int, default=0, show_default=True)
@click.option("--page-size", type=int, default=10, show_default=True)
def list_prescriptions(page: int, page_size: int) -> None:
    """Print one page of prescriptions, oldest first."""

    async def _list():
        async with get_session() as session:
            service = PrescriptionService(PrescriptionRepository(session))
            return await service.get_prescriptions_with_pagination(page, page_size)

    prescriptions = _run(_list)
    _echo_json([_prescription_to_dict(p) for p in prescriptions])


@cli.command("show-prescription")
@click.argument("prescription_id", type=click.UUID)
def show_prescription(prescription_id: UUID) -> None:
    """Print a single prescription with its drugs and fill."""

    async def _show():
        async with get_session() as session:
            service = PrescriptionService(PrescriptionRepository(session))
            return await service.get_prescription_by_id(prescription_id)

    _echo_json(_prescription_to_dict(_run(_show)))


if __name__ == "__main__":
    cli()
