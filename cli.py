#!/usr/bin/env python3
"""
quicknotes CLI.

Primary entry point for all application operations.
Use --service to select what to run.

Usage:
    python cli.py --help
    python cli.py --service server --verbose
    python cli.py --service health
    python cli.py --service config
    python cli.py --service init-db
    python cli.py --service test --test-type unit
    python cli.py --service notes --notes-action add --title "Groceries"
"""

import asyncio
import json
import subprocess
import sys
from pathlib import Path

import click
import structlog

PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from quicknotes.backend.core.logging import get_logger, log_with_source, setup_logging

NOTES_ACTIONS = ["list", "show", "add", "edit", "favorite", "delete"]


def validate_project_root() -> Path:
    """Validate that we're running from the project root."""
    if not (PROJECT_ROOT / ".project_root").exists():
        click.echo(
            click.style("Error: .project_root not found. Run from project root.", fg="red"),
            err=True,
        )
        sys.exit(1)
    return PROJECT_ROOT


@click.command()
@click.option(
    "--service", "-s",
    type=click.Choice(["server", "health", "config", "info", "test", "init-db", "notes"]),
    default="info",
    help="Service or command to run.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output (INFO level logging).")
@click.option("--debug", "-d", is_flag=True, help="Enable debug output (DEBUG level logging).")
@click.option("--host", default=None, help="Server host.")
@click.option("--port", default=None, type=int, help="Server port.")
@click.option("--reload", is_flag=True, help="Enable auto-reload (server only).")
@click.option(
    "--test-type",
    type=click.Choice(["all", "unit", "integration"]),
    default="all",
    help="Test type to run.",
)
@click.option("--coverage", is_flag=True, help="Run tests with coverage.")
@click.option(
    "--notes-action",
    type=click.Choice(NOTES_ACTIONS),
    default="list",
    help="Note operation (notes service only).",
)
@click.option("--id", "note_id", default=None, type=int, help="Note ID (show, edit, favorite, delete).")
@click.option("--title", default=None, help="Note title (add, edit).")
@click.option("--content", default=None, help="Note content (add, edit).")
@click.option(
    "--backend",
    type=click.Choice(["table", "file"]),
    default=None,
    help="Override the store backend from storage.yaml (notes service only).",
)
def main(
    service: str,
    verbose: bool,
    debug: bool,
    host: str | None,
    port: int | None,
    reload: bool,
    test_type: str,
    coverage: bool,
    notes_action: str,
    note_id: int | None,
    title: str | None,
    content: str | None,
    backend: str | None,
) -> None:
    """
    quicknotes CLI.

    Use --service to select what to run.

    \b
    Examples:
        python cli.py --service server --reload --verbose
        python cli.py --service health
        python cli.py --service init-db
        python cli.py --service notes
        python cli.py --service notes --notes-action add --title "Todo" --content "milk"
        python cli.py --service notes --notes-action favorite --id 3
        python cli.py --service notes --notes-action delete --id 3 --backend file
    """
    validate_project_root()

    if debug:
        log_level = "DEBUG"
    elif verbose:
        log_level = "INFO"
    else:
        log_level = "WARNING"

    setup_logging(level=log_level, format_type="console")

    structlog.contextvars.bind_contextvars(source="cli")

    logger = get_logger(__name__)

    logger.debug("CLI invoked", extra={"service": service, "log_level": log_level})

    if service == "server":
        run_server(logger, host, port, reload)
    elif service == "health":
        check_health(logger)
    elif service == "config":
        show_config(logger)
    elif service == "test":
        run_tests(logger, test_type, coverage)
    elif service == "init-db":
        init_database(logger)
    elif service == "notes":
        run_notes(logger, notes_action, note_id, title, content, backend)
    elif service == "info":
        show_info(logger)


def run_server(logger, host: str | None, port: int | None, reload: bool) -> None:
    """Start the FastAPI development server."""
    from quicknotes.backend.core.config import get_app_config

    try:
        server_config = get_app_config().application.server
    except Exception as e:
        logger.error("Failed to load configuration.", extra={"error": str(e)})
        click.echo(
            click.style("Error: Could not load config/settings/application.yaml.", fg="red"),
            err=True,
        )
        sys.exit(1)

    server_host = host or server_config.host
    server_port = port or server_config.port

    logger.info(
        "Starting server",
        extra={"host": server_host, "port": server_port, "reload": reload},
    )

    cmd = [
        sys.executable, "-m", "uvicorn",
        "quicknotes.backend.main:app",
        "--host", server_host,
        "--port", str(server_port),
    ]

    if reload:
        cmd.append("--reload")

    click.echo(f"Starting server at http://{server_host}:{server_port}")
    click.echo("Press Ctrl+C to stop\n")

    try:
        subprocess.run(cmd, check=True)
    except KeyboardInterrupt:
        logger.info("Server stopped")
    except subprocess.CalledProcessError as e:
        logger.error("Server failed to start", extra={"exit_code": e.returncode})
        sys.exit(e.returncode)


def check_health(logger) -> None:
    """Check application health by loading config, the app and the active store."""
    click.echo("Checking application health...\n")

    checks = []

    try:
        from quicknotes.backend.core.config import get_app_config
        app_config = get_app_config()
        checks.append(("YAML configuration", True, f"App: {app_config.application.name}"))
    except Exception as e:
        checks.append(("YAML configuration", False, str(e)))
        logger.error("Configuration failed", extra={"error": str(e)})
        app_config = None

    try:
        from quicknotes.backend.main import get_app
        app = get_app()
        checks.append(("FastAPI application", True, f"Title: {app.title}"))
    except Exception as e:
        checks.append(("FastAPI application", False, str(e)))
        logger.error("FastAPI app failed", extra={"error": str(e)})

    if app_config is not None:
        from quicknotes.backend.api.health import check_database, check_notes_document

        backend = app_config.storage.backend
        check = check_notes_document if backend == "file" else check_database
        result = asyncio.run(_run_store_check(check))
        passed = result["status"] == "healthy"
        detail = f"backend: {backend}" if passed else result.get("error")
        checks.append(("Note store", passed, detail))

    click.echo("Health Check Results:")
    click.echo("-" * 50)

    all_passed = True
    for name, passed, detail in checks:
        status = click.style("✓ PASS", fg="green") if passed else click.style("✗ FAIL", fg="red")
        detail_str = f" ({detail})" if detail else ""
        click.echo(f"  {status}  {name}{detail_str}")
        if not passed:
            all_passed = False

    click.echo("-" * 50)

    if all_passed:
        click.echo(click.style("\nAll checks passed!", fg="green"))
    else:
        click.echo(click.style("\nSome checks failed. See details above.", fg="yellow"))
        sys.exit(1)


async def _run_store_check(check) -> dict:
    from quicknotes.backend.core.database import dispose_engine

    try:
        return await check()
    finally:
        await dispose_engine()


def show_config(logger) -> None:
    """Display loaded configuration."""
    click.echo("Application Configuration:\n")

    try:
        from quicknotes.backend.core.config import get_app_config

        app_config = get_app_config()
        sections = {
            "Application": app_config.application,
            "Database": app_config.database,
            "Logging": app_config.logging,
            "Storage": app_config.storage,
            "Concurrency": app_config.concurrency,
        }

        for title, section in sections.items():
            click.echo(f"{title} Settings (from YAML):")
            click.echo("-" * 40)
            _echo_mapping(section.model_dump())
            click.echo()

        logger.info("Configuration displayed successfully")

    except Exception as e:
        logger.error("Failed to load configuration", extra={"error": str(e)})
        click.echo(click.style(f"Error loading configuration: {e}", fg="red"))
        sys.exit(1)


def _echo_mapping(values: dict, indent: int = 2) -> None:
    for key, value in values.items():
        if isinstance(value, dict):
            click.echo(f"{' ' * indent}{key}:")
            _echo_mapping(value, indent + 2)
        else:
            click.echo(f"{' ' * indent}{key}: {value}")


def run_tests(logger, test_type: str, coverage: bool) -> None:
    """Run the test suite."""
    logger.info("Running tests", extra={"type": test_type, "coverage": coverage})

    cmd = [sys.executable, "-m", "pytest"]

    if test_type == "unit":
        cmd.append("tests/unit")
    elif test_type == "integration":
        cmd.append("tests/integration")
    else:
        cmd.append("tests/")

    cmd.append("-v")

    if coverage:
        cmd.extend(["--cov=quicknotes", "--cov-report=term-missing"])

    click.echo(f"Running: {' '.join(cmd)}\n")

    try:
        result = subprocess.run(cmd)
        sys.exit(result.returncode)
    except FileNotFoundError:
        logger.error("pytest not found. Install with: pip install -e '.[test]'")
        sys.exit(1)


def init_database(logger) -> None:
    """Create the notes table if missing."""
    from quicknotes.backend.core.database import dispose_engine, init_db

    async def _init() -> None:
        try:
            await init_db()
        finally:
            await dispose_engine()

    try:
        asyncio.run(_init())
    except Exception as e:
        logger.error("Database initialization failed", extra={"error": str(e)})
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)

    click.echo(click.style("Notes table ready.", fg="green"))


def run_notes(
    logger,
    action: str,
    note_id: int | None,
    title: str | None,
    content: str | None,
    backend: str | None,
) -> None:
    """Run a note operation directly against the configured store."""
    from quicknotes.backend.core.config import get_app_config
    from quicknotes.backend.core.exceptions import ApplicationError

    if action in {"show", "edit", "favorite", "delete"} and note_id is None:
        click.echo(click.style(f"Error: --id is required for '{action}'.", fg="red"), err=True)
        sys.exit(2)
    if action == "add" and not title:
        click.echo(click.style("Error: --title is required for 'add'.", fg="red"), err=True)
        sys.exit(2)

    store_backend = backend or get_app_config().storage.backend

    try:
        result = asyncio.run(
            _run_note_action(store_backend, action, note_id, title, content)
        )
    except ApplicationError as e:
        log_with_source(logger, "cli", "warning", "Note operation failed", code=e.code, action=action)
        click.echo(click.style(f"Error [{e.code}]: {e.message}", fg="red"), err=True)
        sys.exit(1)

    log_with_source(logger, "cli", "info", "Note operation completed", action=action, backend=store_backend)
    click.echo(json.dumps(result, indent=2, ensure_ascii=False))


async def _run_note_action(
    backend: str,
    action: str,
    note_id: int | None,
    title: str | None,
    content: str | None,
):
    from quicknotes.backend.core.concurrency import shutdown_pools
    from quicknotes.backend.core.database import dispose_engine, init_db, session_scope
    from quicknotes.backend.core.dependencies import build_note_store
    from quicknotes.backend.schemas.note import NoteCreate, NoteResponse, NoteUpdate
    from quicknotes.backend.services.note import NoteService

    async def _dispatch(service: NoteService):
        if action == "list":
            notes = await service.list_notes()
            return [NoteResponse.model_validate(n).model_dump(mode="json") for n in notes]
        if action == "show":
            note = await service.get_note(note_id)
        elif action == "add":
            note = await service.create_note(
                _parse_note_input(NoteCreate, {"title": title, "content": content})
            )
        elif action == "edit":
            changes = {k: v for k, v in {"title": title, "content": content}.items() if v is not None}
            note = await service.update_note(note_id, _parse_note_input(NoteUpdate, changes))
        elif action == "favorite":
            note = await service.toggle_favorite(note_id)
        else:
            note = await service.delete_note(note_id)
        return NoteResponse.model_validate(note).model_dump(mode="json")

    try:
        if backend == "file":
            return await _dispatch(NoteService(build_note_store("file")))

        await init_db()
        async with session_scope() as session:
            return await _dispatch(NoteService(build_note_store("table", session)))
    finally:
        await dispose_engine()
        await shutdown_pools()


def _parse_note_input(schema, data: dict):
    """Build a note input schema, reporting field errors as ValidationError."""
    from pydantic import ValidationError as SchemaValidationError

    from quicknotes.backend.core.exceptions import ValidationError

    try:
        return schema.model_validate(data)
    except SchemaValidationError as e:
        errors = [
            {"field": ".".join(str(loc) for loc in err["loc"]), "message": err["msg"]}
            for err in e.errors()
        ]
        first = errors[0]
        raise ValidationError(
            f"Invalid {first['field']}: {first['message']}",
            details={"validation_errors": errors},
        ) from e


def show_info(logger) -> None:
    """Display application information."""
    click.echo("quicknotes")
    click.echo("=" * 40)

    try:
        from quicknotes.backend.core.config import get_app_config
        app_config = get_app_config()
        click.echo(f"Name: {app_config.application.name}")
        click.echo(f"Version: {app_config.application.version}")
        click.echo(f"Description: {app_config.application.description}")
        click.echo(f"Note store: {app_config.storage.backend}")
    except Exception as e:
        logger.error(
            "Failed to load application configuration",
            extra={"error": str(e)},
        )
        click.echo(
            click.style("Error: Could not load application.yaml configuration.", fg="red"),
            err=True,
        )
        sys.exit(1)

    click.echo()
    click.echo("Services (--service):")
    click.echo("  server         FastAPI development server")
    click.echo("  health         Check configuration, app and note store")
    click.echo("  config         Display configuration")
    click.echo("  init-db        Create the notes table")
    click.echo("  notes          Run a note operation (--notes-action)")
    click.echo("  test           Run test suite")
    click.echo("  info           Show this information")
    click.echo()
    click.echo("Note actions (--notes-action):")
    click.echo("  " + ", ".join(NOTES_ACTIONS))

    logger.debug("Info displayed")


if __name__ == "__main__":
    main()
