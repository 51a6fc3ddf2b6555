#!/usr/bin/env python3
"""
Battery shop ledger management CLI.

Usage:
    python manage.py serve       Start the API server
    python manage.py migrate     Apply pending database migrations
    python manage.py status      Show storage backend and migration status
    python manage.py stats       Print dashboard figures
    python manage.py export      Write the stored ledger to a JSON file
    python manage.py import      Replace the stored ledger from a JSON file
"""

import argparse
import asyncio
import json
import subprocess
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parent


async def _open_session():
    """Prepare storage for the configured backend and load the ledger."""
    from src.application.services import get_ledger_session
    from src.config import get_settings

    if get_settings().storage.backend == "sqlite":
        from src.infrastructure.storage.sqlite.migrations.migrator import run_migrations

        await run_migrations(create_backup_before=False)

    return await get_ledger_session()


async def _close_storage() -> None:
    from src.config import get_settings

    if get_settings().storage.backend == "sqlite":
        from src.infrastructure.storage.sqlite import close_pool

        await close_pool()


def cmd_serve(args: argparse.Namespace) -> None:
    """Start the API server under uvicorn."""
    uvicorn_cmd = [
        sys.executable, "-m", "uvicorn",
        "src.api.main:app",
        "--host", args.host,
        "--port", str(args.port),
    ]
    if args.reload:
        uvicorn_cmd.append("--reload")

    print(f"Starting server on {args.host}:{args.port}...")
    try:
        result = subprocess.run(uvicorn_cmd, cwd=str(ROOT_DIR))
    except KeyboardInterrupt:
        print("\nServer stopped.")
        return
    sys.exit(result.returncode)


def cmd_migrate(args: argparse.Namespace) -> None:
    """Apply pending migrations to the SQLite database."""
    from src.infrastructure.storage.sqlite.migrations.migrator import run_migrations

    results = asyncio.run(run_migrations(create_backup_before=not args.no_backup))
    if not results:
        print("Database is up to date.")
        return

    for r in results:
        state = "ok" if r.success else f"FAILED ({r.error})"
        print(f"  v{r.version}_{r.name}: {state} [{r.execution_time_ms} ms]")
    if not all(r.success for r in results):
        sys.exit(1)


def cmd_status(args: argparse.Namespace) -> None:
    """Show the storage backend and migration status."""
    from src.config import get_settings
    from src.infrastructure.storage.sqlite.migrations.migrator import get_migration_status

    settings = get_settings()
    print(f"Storage backend: {settings.storage.backend}")
    print(f"LLM provider:    {settings.llm.provider} ({settings.llm.model_name})")

    if settings.storage.backend != "sqlite":
        return

    status = asyncio.run(get_migration_status())
    print(f"Database:        {settings.storage.db_path}")
    if not status["exists"]:
        print("  Not created yet. Run 'migrate'.")
    print(f"  Applied: {', '.join(status['applied_migrations']) or '-'}")
    print(f"  Pending: {', '.join(status['pending_migrations']) or '-'}")


def cmd_stats(args: argparse.Namespace) -> None:
    """Print dashboard figures for the stored ledger."""
    from src.config import get_settings
    from src.core.services.formatting import format_currency, format_weight

    async def _run():
        try:
            session = await _open_session()
            return session.stats(), session.engine.low_stock()
        finally:
            await _close_storage()

    stats, low_stock = asyncio.run(_run())
    symbol = get_settings().ledger.currency_symbol

    print(f"Units in stock:   {stats.total_units}")
    print(f"Low-stock lines:  {stats.low_stock_count}")
    print(f"Inventory value:  {format_currency(stats.inventory_value, symbol)}")
    print(f"Scrap:            {format_weight(stats.scrap_weight)} = {format_currency(stats.scrap_value, symbol)}")
    print(f"Cash balance:     {format_currency(stats.cash_balance, symbol)}")
    for battery in low_stock:
        print(f"  ! {battery.label}: {battery.quantity} (min {battery.min_stock})")


def cmd_export(args: argparse.Namespace) -> None:
    """Write every ledger key to a JSON file (or stdout)."""

    async def _run() -> dict[str, str]:
        try:
            session = await _open_session()
            return session.export_raw()
        finally:
            await _close_storage()

    values = asyncio.run(_run())
    text = json.dumps(values, indent=2, ensure_ascii=False)

    if args.output == "-":
        print(text)
    else:
        Path(args.output).write_text(text, encoding="utf-8")
        print(f"Exported {len(values)} keys -> {args.output}")


def cmd_import(args: argparse.Namespace) -> None:
    """Replace the stored ledger with the keys in a JSON file."""
    from src.core.exceptions import SnapshotDecodeError

    path = Path(args.input)
    if not path.exists():
        print(f"Error: {path} not found.")
        sys.exit(1)

    values = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(values, dict):
        print("Error: expected a JSON object of key -> stored value.")
        sys.exit(1)
    # Scalars may have been exported as numbers by hand-edited files
    values = {k: v if isinstance(v, str) else json.dumps(v) for k, v in values.items()}

    async def _run():
        try:
            session = await _open_session()
            await session.import_raw(values)
            return session.stats()
        finally:
            await _close_storage()

    try:
        stats = asyncio.run(_run())
    except SnapshotDecodeError as e:
        print(f"Error: {e.message}")
        sys.exit(1)

    print(f"Imported {len(values)} keys: {stats.total_units} units, balance {stats.cash_balance:.2f}.")


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Battery shop ledger management CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    sub = parser.add_subparsers(dest="command", required=True)

    # serve
    p_serve = sub.add_parser("serve", help="Start the API server")
    p_serve.add_argument("--host", default="127.0.0.1", help="Bind host (default: 127.0.0.1)")
    p_serve.add_argument("--port", type=int, default=8000, help="Bind port (default: 8000)")
    p_serve.add_argument("--reload", action="store_true", help="Reload on code changes")
    p_serve.set_defaults(func=cmd_serve)

    # migrate
    p_migrate = sub.add_parser("migrate", help="Apply pending database migrations")
    p_migrate.add_argument("--no-backup", action="store_true", help="Skip the pre-migration backup")
    p_migrate.set_defaults(func=cmd_migrate)

    # status
    p_status = sub.add_parser("status", help="Show storage and migration status")
    p_status.set_defaults(func=cmd_status)

    # stats
    p_stats = sub.add_parser("stats", help="Print dashboard figures")
    p_stats.set_defaults(func=cmd_stats)

    # export
    p_export = sub.add_parser("export", help="Write the stored ledger to JSON")
    p_export.add_argument("output", nargs="?", default="-", help="Output file (default: stdout)")
    p_export.set_defaults(func=cmd_export)

    # import
    p_import = sub.add_parser("import", help="Replace the stored ledger from JSON")
    p_import.add_argument("input", help="JSON file written by 'export'")
    p_import.set_defaults(func=cmd_import)

    args = parser.parse_args()

    if args.command != "serve":
        from src.config import configure_logging

        configure_logging(level=args.log_level)

    args.func(args)


if __name__ == "__main__":
    main()
