"""
Command line dashboard for the client management API.

Signs in against the API, keeps the session token in a per-user file and
manages client records:

    clientdash login
    clientdash clients list --search acme
    clientdash clients set 6f1c... --subscription-amount 50
    clientdash dashboard
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any, Awaitable, Callable, List, Optional

import click
import httpx
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from clientdash.core.config import settings
from clientdash.core.logging import setup_logging
from clientdash.sdk import dashboard
from clientdash.sdk.api import ApiService
from clientdash.sdk.errors import ApiError
from clientdash.sdk.models import (
    ClientData, ClientPatch, ClientRecord, ForgotPasswordData, LoginData, PasswordResetData,
    RegisterData,
)
from clientdash.sdk.session import FileTokenStore, SessionContext

console = Console()
logger = logging.getLogger(__name__)

DATE_FORMATS = ["%Y-%m-%d"]


@dataclass
class CliState:
    api_url: Optional[str] = None
    session: Optional[SessionContext] = None
    transport: Optional[httpx.AsyncBaseTransport] = field(default=None, repr=False)


def run_api(state: CliState, operation: Callable[[ApiService, SessionContext], Awaitable[Any]]) -> Any:
    """Run one API operation, printing ApiError as a red message and exiting 1."""
    async def runner():
        async with ApiService(state.api_url, transport=state.transport) as api:
            return await operation(api, state.session)

    try:
        return asyncio.run(runner())
    except ApiError as e:
        console.print(f"[bold red]Error:[/bold red] {e.message}")
        logger.debug(repr(e))
        raise click.exceptions.Exit(1)


def validated(model, **values):
    """Build an input model, reporting validation failures like form errors."""
    try:
        return model(**values)
    except ValidationError as e:
        for error in e.errors():
            field_name = ".".join(str(part) for part in error["loc"]) or "input"
            console.print(f"[red]{field_name}:[/red] {error['msg']}")
        raise click.exceptions.Exit(1)


def format_amount(amount: float) -> str:
    return f"${amount:,.2f}"


def render_clients(clients: List[ClientRecord], today: Optional[date] = None):
    table = Table(show_lines=False)
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Client")
    table.add_column("Company")
    table.add_column("Renewal")
    table.add_column("Amount", justify="right")

    for client in clients:
        renewal = client.subscription_renewal_date.strftime("%b %d, %Y")
        if dashboard.is_upcoming(client, today):
            renewal += "\n[orange3]Upcoming renewal[/orange3]"
        table.add_row(
            client.id,
            f"{client.name}\n{client.email}\n{client.phone}",
            client.company,
            renewal,
            format_amount(client.subscription_amount),
        )
    console.print(table)


def render_client(client: ClientRecord):
    console.print(f"[bold]{client.name}[/bold] ({client.id})")
    console.print(f"  Email:    {client.email}")
    console.print(f"  Phone:    {client.phone}")
    console.print(f"  Company:  {client.company}")
    console.print(f"  Renewal:  {client.subscription_renewal_date.isoformat()}")
    console.print(f"  Amount:   {format_amount(client.subscription_amount)}")
    if client.notes:
        console.print(f"  Notes:    {client.notes}")


# ==================== Root ====================

@click.group()
@click.option(
    "--api-url",
    envvar="CLIENTDASH_API_URL",
    default=None,
    help="API base URL (default: CLIENTDASH_API_URL setting).",
)
@click.option(
    "--token-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Where the session token is kept.",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging.")
@click.pass_context
def cli(ctx, api_url: Optional[str], token_file: Optional[Path], verbose: bool):
    """Manage subscription clients from the terminal."""
    setup_logging("DEBUG" if verbose else "WARNING")

    state = ctx.ensure_object(CliState)
    if api_url:
        state.api_url = api_url
    if state.session is None:
        state.session = SessionContext(FileTokenStore(token_file or settings.TOKEN_STORE_PATH))


# ==================== Auth ====================

@cli.command()
@click.option("--email", prompt=True)
@click.option("--password", prompt=True, hide_input=True)
@click.pass_obj
def login(state: CliState, email: str, password: str):
    """Sign in and remember the session."""
    data = validated(LoginData, email=email, password=password)
    user = run_api(state, lambda api, session: api.authenticate(session, data.email, data.password))
    console.print(f"[green]Logged in as {user.name} <{user.email}>[/green]")


@cli.command()
@click.option("--name", prompt=True)
@click.option("--email", prompt=True)
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
@click.pass_obj
def register(state: CliState, name: str, email: str, password: str):
    """Create an account and sign in."""
    data = validated(RegisterData, name=name, email=email, password=password)
    user = run_api(
        state, lambda api, session: api.register(session, data.name, data.email, data.password)
    )
    console.print(f"[green]Welcome, {user.name}! You are now logged in.[/green]")


@cli.command()
@click.pass_obj
def logout(state: CliState):
    """Sign out; the local session is always cleared."""
    run_api(state, lambda api, session: api.end_session(session))
    console.print("Logged out.")


@cli.command()
@click.pass_obj
def whoami(state: CliState):
    """Show the signed-in user."""
    if not state.session.is_authenticated:
        console.print("Not logged in.")
        raise click.exceptions.Exit(1)
    user = run_api(state, lambda api, session: api.fetch_profile(session))
    console.print(f"{user.name} <{user.email}>")


@cli.command("forgot-password")
@click.option("--email", prompt=True)
@click.pass_obj
def forgot_password(state: CliState, email: str):
    """Ask for a password reset link."""
    data = validated(ForgotPasswordData, email=email)
    result = run_api(state, lambda api, session: api.request_password_reset(session, data.email))
    console.print(result.message)


@cli.command("reset-password")
@click.argument("token")
@click.option("--password", prompt="New password", hide_input=True, confirmation_prompt=True)
@click.pass_obj
def reset_password(state: CliState, token: str, password: str):
    """Set a new password using the token from the reset link."""
    data = validated(PasswordResetData, password=password)
    result = run_api(
        state, lambda api, session: api.complete_password_reset(session, token, data.password)
    )
    console.print(f"[green]{result.message}[/green]")


# ==================== Clients ====================

@cli.group()
def clients():
    """Create, inspect, change and remove clients."""


@clients.command("list")
@click.option("--search", "-s", default="", help="Filter by name, email or company.")
@click.pass_obj
def list_clients(state: CliState, search: str):
    """List clients."""
    records = run_api(state, lambda api, session: api.list_clients(session))
    matches = dashboard.filter_clients(records, search)
    if not matches:
        if search:
            console.print("No clients found matching your search.")
        else:
            console.print("No clients yet. Add your first client to get started.")
        return
    render_clients(matches)


@clients.command("show")
@click.argument("client_id")
@click.pass_obj
def show_client(state: CliState, client_id: str):
    """Show one client by id."""
    render_client(run_api(state, lambda api, session: api.get_client(session, client_id)))


@clients.command("find")
@click.argument("email")
@click.pass_obj
def find_client(state: CliState, email: str):
    """Show one client by email."""
    render_client(run_api(state, lambda api, session: api.get_client_by_email(session, email)))


def client_options(required: bool):
    """Options shared by ``add`` and ``update``; prompted for when required."""
    prompt = required or None

    def decorator(f):
        options = [
            click.option("--name", prompt=prompt and "Full name"),
            click.option("--email", prompt=prompt and "Email"),
            click.option("--phone", prompt=prompt and "Phone"),
            click.option("--company", prompt=prompt and "Company"),
            click.option(
                "--renewal-date", "subscription_renewal_date",
                type=click.DateTime(formats=DATE_FORMATS),
                prompt=prompt and "Subscription renewal date (YYYY-MM-DD)",
            ),
            click.option(
                "--amount", "subscription_amount", type=float,
                prompt=prompt and "Subscription amount ($)",
            ),
            click.option("--notes", default=None, help="Optional notes about this client."),
        ]
        for option in reversed(options):
            f = option(f)
        return f

    return decorator


def collect_fields(values: dict) -> dict:
    fields = {key: value for key, value in values.items() if value is not None}
    renewal = fields.get("subscription_renewal_date")
    if isinstance(renewal, datetime):
        fields["subscription_renewal_date"] = renewal.date()
    return fields


@clients.command("add")
@client_options(required=True)
@click.pass_obj
def add_client(state: CliState, **values):
    """Add a new client."""
    data = validated(ClientData, **collect_fields(values))
    record = run_api(state, lambda api, session: api.create_client(session, data))
    console.print(f"[green]Client created successfully[/green] ({record.id})")


@clients.command("update")
@click.argument("client_id")
@client_options(required=False)
@click.pass_obj
def update_client(state: CliState, client_id: str, **values):
    """Replace a client, keeping current values for options not given."""
    async def replace(api: ApiService, session: SessionContext):
        current = await api.get_client(session, client_id)
        merged = current.to_data().model_dump()
        merged.update(collect_fields(values))
        data = validated(ClientData, **merged)
        return await api.replace_client(session, client_id, data)

    run_api(state, replace)
    console.print("[green]Client updated successfully[/green]")


@clients.command("set")
@click.argument("client_id")
@client_options(required=False)
@click.pass_obj
def set_client_fields(state: CliState, client_id: str, **values):
    """Change only the given fields of a client."""
    fields = collect_fields(values)
    if not fields:
        raise click.UsageError("Give at least one field to change.")
    patch = validated(ClientPatch, **fields)
    record = run_api(state, lambda api, session: api.patch_client(session, client_id, patch))
    render_client(record)


@clients.command("delete")
@click.argument("client_id")
@click.option("--yes", "-y", is_flag=True, default=False, help="Do not ask for confirmation.")
@click.pass_obj
def delete_client(state: CliState, client_id: str, yes: bool):
    """Remove a client."""
    if not yes:
        click.confirm("Are you sure you want to delete this client?", abort=True)
    result = run_api(state, lambda api, session: api.delete_client(session, client_id))
    console.print(f"[green]{result.message}[/green]")


# ==================== Dashboard ====================

@cli.command("dashboard")
@click.option("--window", default=dashboard.RENEWAL_WINDOW_DAYS, show_default=True,
              help="Days ahead counted as upcoming.")
@click.pass_obj
def show_dashboard(state: CliState, window: int):
    """Client count, upcoming renewals and revenue."""
    records = run_api(state, lambda api, session: api.list_clients(session))
    summary = dashboard.summarize(records)
    upcoming = dashboard.upcoming_renewals(records, window_days=window)

    console.print(f"[bold]Total clients:[/bold] {summary.total_clients}")
    console.print(f"[bold]Upcoming renewals:[/bold] {len(upcoming)}")
    console.print(f"[bold]Monthly revenue:[/bold] {format_amount(summary.total_revenue)}")
    if upcoming:
        render_clients(sorted(upcoming, key=lambda c: c.subscription_renewal_date))


# ==================== Server ====================

@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=3000, show_default=True, type=int)
@click.option("--reload", is_flag=True, default=False)
def serve(host: str, port: int, reload: bool):
    """Run the API server."""
    import uvicorn

    uvicorn.run("clientdash.main:app", host=host, port=port, reload=reload)


def main():
    cli(prog_name="clientdash")


if __name__ == "__main__":
    main()
