"""Sweep command - run one retention sweep now."""

import asyncio
import sys

import cyclopts
from sqlalchemy.ext.asyncio import AsyncEngine

from redflag.application.di import create_container
from redflag.cli.console import get_console
from redflag.config import Config, configure_logging
from redflag.domain.retention.model.value import SweepReport
from redflag.domain.retention.service.retention import RetentionService
from redflag.domain.shared.error import RedFlagError
from redflag.infrastructure.persistence.database import create_tables
from redflag.util.di.scope import Scope

app = cyclopts.App(name="sweep", help="Delete expired uploads")


async def _run_sweep(config: Config) -> SweepReport:
    container = create_container(config)
    try:
        if config.database.url.startswith("sqlite"):
            await create_tables(await container.get(AsyncEngine))
        async with container(scope=Scope.UOW) as scope:
            retention = await scope.get(RetentionService)
            return await retention.sweep()
    finally:
        await container.close()


@app.default
def sweep() -> None:
    """Run a single retention sweep and print what it did."""
    console = get_console()
    config = Config()  # type: ignore[call-arg]
    configure_logging(config.logging)

    try:
        report = asyncio.run(_run_sweep(config))
    except RedFlagError as e:
        console.error(f"Sweep failed: {e.message}")
        sys.exit(1)

    console.table(
        [
            {"outcome": "deleted", "count": len(report.deleted)},
            {"outcome": "already missing", "count": len(report.missing)},
            {"outcome": "failed", "count": len(report.failed)},
        ],
        [("outcome", "Outcome"), ("count", "Rows")],
        title=f"Retention sweep ({config.retention.days} day window)",
    )
    for failure in report.failed:
        console.warning(f"{failure.storage_id}: {failure.reason}")

    if report.failed:
        sys.exit(2)
    console.success("Sweep complete")
