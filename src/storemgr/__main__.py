"""`python -m storemgr`: store commands, or serve the HTTP API."""

from enum import Enum
from typing import Optional

import typer

from storemgr.cli import app as cli_app
from storemgr.config import get_config


class RunMode(str, Enum):
    CLI = "cli"
    API = "api"


app = typer.Typer(
    help="Retail store manager: catalog, sales and invoices from the shell or over HTTP.",
    no_args_is_help=False,
)
app.add_typer(cli_app, name="", help="Catalog, sales and report commands.")


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    mode: RunMode = typer.Option(
        RunMode.CLI,
        "--mode",
        case_sensitive=False,
        help="cli runs a store command; api serves the store over HTTP",
    ),
    host: Optional[str] = typer.Option(None, "--host", help="API host (default: API_HOST)"),
    port: Optional[int] = typer.Option(None, "--port", help="API port (default: API_PORT)"),
) -> None:
    """Retail store manager: catalog, sales and invoices from the shell or over HTTP."""
    if mode is RunMode.API:
        import uvicorn

        config = get_config()
        uvicorn.run(
            "storemgr.api:create_app",
            factory=True,
            host=host or config.api_host,
            port=port or config.api_port,
            reload=False,
        )
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


if __name__ == "__main__":
    app()
