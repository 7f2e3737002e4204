"""Command-line interface for DocGate.

This module provides the CLI commands for running and inspecting
a DocGate deployment.
"""

from datetime import timedelta
from typing import NoReturn

import click

from docgate import __version__
from docgate.core.config import get_settings
from docgate.core.exceptions import DocGateError
from docgate.core.logging import configure_logging, get_logger


@click.group()
@click.version_option(version=__version__, prog_name="DocGate")
def cli() -> None:
    """DocGate - policy-gated document collections.

    Settings are read from DOCGATE_* environment variables and .env files.
    """


@cli.command()
@click.option("--host", type=str, default=None, help="Host to bind to (overrides config)")
@click.option("--port", type=int, default=None, help="Port to bind to (overrides config)")
@click.option(
    "--workers",
    type=int,
    default=None,
    help="Number of worker processes (overrides config)",
)
@click.option(
    "--reload/--no-reload",
    default=None,
    help="Enable auto-reload (defaults to on in development)",
)
def serve(host: str | None, port: int | None, workers: int | None, reload: bool | None) -> None:
    """Start the DocGate server."""
    import uvicorn

    settings = get_settings()

    bind_host = host or settings.host
    bind_port = port or settings.port
    bind_workers = workers or settings.workers

    if reload is None:
        reload = settings.is_development

    # Worker processes do not share an in-process store or a SQLite file lock
    single_process = settings.data_service == "memory" or (
        settings.data_service == "sql" and settings.database_url.startswith("sqlite")
    )
    if bind_workers > 1 and single_process:
        click.echo(
            f"Error: the '{settings.data_service}' data service does not support "
            "multiple worker processes.",
            err=True,
        )
        raise SystemExit(1)

    configure_logging(settings)

    logger = get_logger(__name__)
    logger.info(
        "Starting DocGate server",
        host=bind_host,
        port=bind_port,
        workers=bind_workers,
        reload=reload,
        environment=settings.environment,
    )

    uvicorn.run(
        "docgate.infrastructure.api.app:create_app",
        factory=True,
        host=bind_host,
        port=bind_port,
        workers=1 if reload else bind_workers,
        reload=reload,
        log_level=settings.log_level.lower(),
        access_log=True,
    )


@cli.command()
def info() -> None:
    """Display DocGate configuration."""
    settings = get_settings()

    click.echo(f"""
DocGate v{settings.app_version}
{'=' * 40}

Configuration:
  Environment:  {settings.environment}
  Debug:        {settings.debug}
  API Prefix:   {settings.api_prefix}
  Collections:  {settings.collections_module or '(none)'}

Server:
  Host:         {settings.host}
  Port:         {settings.port}
  Workers:      {settings.workers}

Services:
  Data:         {settings.data_service}
  Logging:      {settings.logging_service}
  Auth:         {settings.auth_service}

Database:
  URL:          {settings.database_url}
  Pool Size:    {settings.db_pool_size}
  Echo:         {settings.db_echo}

Security:
  Token Expire: {settings.access_token_expire_minutes} minutes
  Issuer:       {settings.jwt_issuer}

Logging:
  Level:        {settings.log_level}
  Format:       {settings.log_format}
""")


@cli.command("check-collections")
@click.option(
    "--module",
    "module_path",
    type=str,
    default=None,
    help="Dotted module defining COLLECTIONS (overrides config)",
)
def check_collections(module_path: str | None) -> None:
    """Load the configured collection schemas and list them."""
    from docgate.infrastructure.api.app import load_collections

    settings = get_settings()
    module_path = module_path or settings.collections_module
    if not module_path:
        click.echo("ERROR: No collections module configured.", err=True)
        raise SystemExit(1)

    try:
        schemas = load_collections(module_path)
    except DocGateError as e:
        click.echo(f"ERROR: {e.message}", err=True)
        raise SystemExit(1) from e

    click.echo(f"{len(schemas)} collection(s) in {module_path}:")
    for schema in schemas:
        route_set = "full" if schema.full_crud else "basic"
        click.echo(
            f"  {schema.name:<20} /{schema.path.strip('/'):<20} "
            f"{len(schema.fields)} rule(s), {route_set} routes"
        )


@cli.command("issue-token")
@click.argument("user_id")
@click.option("--admin", is_flag=True, default=False, help="Grant admin rights")
@click.option(
    "--expires-minutes",
    type=int,
    default=None,
    help="Token lifetime in minutes (defaults to config)",
)
def issue_token(user_id: str, admin: bool, expires_minutes: int | None) -> None:
    """Mint an access token for USER_ID (development only)."""
    from docgate.infrastructure.auth.jwt_service import JWTService

    settings = get_settings()
    if settings.is_production:
        click.echo("ERROR: Refusing to issue tokens in production mode.", err=True)
        raise SystemExit(1)

    expires_delta = timedelta(minutes=expires_minutes) if expires_minutes else None
    service = JWTService(secret_key=settings.secret_key, issuer=settings.jwt_issuer)
    click.echo(service.create_access_token(user_id, admin=admin, expires_delta=expires_delta))


def main() -> NoReturn:
    """Main entry point for the CLI.

    This function is called when the `docgate` command is run
    or when using `python -m docgate`.
    """
    cli()


if __name__ == "__main__":
    main()
