"""Usage command - show a user's analysis count for today."""

import asyncio
import sys
from uuid import UUID

import cyclopts

from redflag.application.di import create_container
from redflag.cli.console import get_console
from redflag.config import Config, configure_logging
from redflag.domain.auth.model.value import UserId
from redflag.domain.auth.port.repository import UserRepository
from redflag.domain.shared.error import NotFoundError
from redflag.domain.usage.model.usage import UsageSummary
from redflag.domain.usage.service.usage import UsageLimiter
from redflag.util.di.scope import Scope

app = cyclopts.App(name="usage", help="Show daily usage for a user")


async def _current_usage(config: Config, user_id: UserId) -> UsageSummary:
    container = create_container(config)
    try:
        async with container(scope=Scope.UOW) as scope:
            users = await scope.get(UserRepository)
            user = await users.get(user_id)
            if user is None:
                raise NotFoundError(f"User not found: {user_id}")
            limiter = await scope.get(UsageLimiter)
            limit = limiter.limit_for(user.is_guest)
            return await limiter.current_usage(user_id, limiter.today(), limit)
    finally:
        await container.close()


@app.default
def usage(user_id: UUID) -> None:
    """Show today's analysis count for USER_ID.

    Args:
        user_id: The user's id.
    """
    console = get_console()
    config = Config()  # type: ignore[call-arg]
    configure_logging(config.logging)

    try:
        summary = asyncio.run(_current_usage(config, UserId(user_id)))
    except NotFoundError as e:
        console.error(e.message)
        sys.exit(1)

    console.print(f"[bold]Date:[/bold] {summary.date.isoformat()} ({config.usage.timezone})")
    console.print(f"[bold]Analyses:[/bold] {summary.count} / {summary.limit}")
    console.print(f"[bold]Remaining:[/bold] {summary.remaining}")
