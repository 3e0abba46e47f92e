"""CLI commands for client resolution.

Usage:
    calldesk resolve search --campaign-id ID --name NAME --first-name FIRST
        [--phone-start DIGITS] [--phone-end DIGITS]
"""

import asyncio
import sys
from uuid import UUID

import click


@click.group(name="resolve")
def cli():
    """Client resolution commands."""
    pass


@cli.command(name="search")
@click.option("--campaign-id", type=click.UUID, required=True, help="Campaign to search")
@click.option("--name", default=None, help="Client last name")
@click.option("--first-name", default=None, help="Client first name")
@click.option("--phone-start", default=None, help="Leading phone digits")
@click.option("--phone-end", default=None, help="Trailing phone digits")
def search(
    campaign_id: UUID,
    name: str | None,
    first_name: str | None,
    phone_start: str | None,
    phone_end: str | None,
):
    """Find the client of a campaign matching a name and phone fragments.

    Exits with status 1 when no client matches and 2 when the database
    could not be queried.

    Examples:

        # Exact or misspelled name
        calldesk resolve search --campaign-id 6f1c... --name Zaika --first-name Romane

        # Narrow the scan with phone fragments
        calldesk resolve search --campaign-id 6f1c... --name Zaika --phone-start +3313 --phone-end 90
    """
    from ..config import get_settings
    from ..db import get_db_session
    from ..models import SearchRequest
    from ..resolution import ClientResolver, SQLClientStore, StoreUnavailable

    request = SearchRequest(
        campaign_id=campaign_id,
        name=name,
        first_name=first_name,
        phone_fragment_start=phone_start,
        phone_fragment_end=phone_end,
    )

    async def _search():
        settings = get_settings()
        async with get_db_session() as session:
            store = SQLClientStore(session, batch_size=settings.resolution_stream_batch_size)
            return await ClientResolver.from_settings(store, settings).resolve(request)

    try:
        result = asyncio.run(_search())
    except StoreUnavailable as e:
        click.echo(f"Error: client store unavailable ({e})", err=True)
        sys.exit(2)

    if not result.found:
        click.echo("no client found")
        if result.score is not None:
            click.echo(f"  Best score: {result.score:.3f} (below acceptance threshold)")
        sys.exit(1)

    record = result.record
    click.echo(f"\nClient: {record.id}")
    click.echo("  Pass: ", nl=False)
    click.secho(result.match_pass.value, fg="green")
    click.echo(f"  Name: {record.name or '-'}")
    click.echo(f"  First name: {record.firstname or '-'}")
    click.echo(f"  Phone: {record.phone}")
    if result.score is not None:
        click.echo(f"  Score: {result.score:.3f}")
    if result.candidates_examined is not None:
        click.echo(f"  Candidates examined: {result.candidates_examined}")
