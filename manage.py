#!/usr/bin/env python3
"""
RMC management CLI.

Usage:
    python manage.py serve           Start the API server
    python manage.py migrate         Apply pending database migrations
    python manage.py status          Show migration status and schema health
    python manage.py repair RM_ID    Re-propagate a raw material's price
"""

import argparse
import asyncio
import subprocess
import sys
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parent


def cmd_serve(args: argparse.Namespace) -> None:
    """Start uvicorn serving the API."""
    uvicorn_cmd = [
        sys.executable, "-m", "uvicorn",
        "rmc.api.main:app",
        "--host", args.host,
        "--port", str(args.port),
    ]
    if args.reload:
        uvicorn_cmd.append("--reload")

    print(f"Starting server on {args.host}:{args.port}...")
    print(f"  API docs:  http://{args.host}:{args.port}/docs (debug only)")
    try:
        sys.exit(subprocess.call(uvicorn_cmd, cwd=str(ROOT_DIR)))
    except KeyboardInterrupt:
        print("\nServer stopped.")


async def _migrate(no_backup: bool) -> int:
    from rmc.infrastructure.storage.sqlite.migrations import run_migrations

    results = await run_migrations(create_backup_before=not no_backup)
    if not results:
        print("Database is up to date.")
        return 0

    failed = 0
    for result in results:
        if result.success:
            print(f"  v{result.version} {result.name}: applied ({result.execution_time_ms}ms)")
        else:
            failed += 1
            print(f"  v{result.version} {result.name}: FAILED ({result.error})")
    return 1 if failed else 0


def cmd_migrate(args: argparse.Namespace) -> None:
    """Apply pending migrations."""
    sys.exit(asyncio.run(_migrate(args.no_backup)))


async def _status() -> int:
    from rmc.infrastructure.storage.sqlite.migrations import (
        get_migration_status,
        verify_schema_integrity,
    )

    status = await get_migration_status()
    if not status["exists"]:
        print("Database does not exist yet. Run 'migrate' first.")
        return 1

    print(f"Current version: {status['current_version']}")
    print(f"Applied:         {len(status['applied_migrations'])}/{status['total_migrations']}")
    for version in status["pending_migrations"]:
        print(f"  pending: v{version}")

    failed = 0
    for check in await verify_schema_integrity():
        print(f"  {check['check']}: {check['status']}")
        if check["status"] != "PASS":
            failed += 1
    return 1 if failed else 0


def cmd_status(args: argparse.Namespace) -> None:
    """Show migration status."""
    sys.exit(asyncio.run(_status()))


async def _repair(raw_material_id: int, actor: str | None) -> int:
    from rmc.application.services import get_cost_propagator_service
    from rmc.config import configure_logging, get_settings
    from rmc.core.exceptions import RMCError
    from rmc.infrastructure.storage.sqlite import close_pool
    from rmc.infrastructure.storage.sqlite.migrations import run_migrations

    configure_logging()
    await run_migrations(create_backup_before=False)
    propagator = await get_cost_propagator_service()
    try:
        result = await propagator.repair_raw_material(
            raw_material_id, actor or get_settings().costing.default_actor
        )
    except RMCError as e:
        error = e.to_dict()
        print(f"{error['error']}: {error['message']}", file=sys.stderr)
        return 1
    finally:
        await close_pool()

    print(f"Updated recipes:  {result.updated_recipe_ids or '-'}")
    print(f"Repaired recipes: {result.repaired_recipe_ids or '-'}")
    if result.has_failures:
        for recipe_id, code in result.failed_recipe_ids.items():
            print(f"  recipe {recipe_id} failed: {code}")
        return 1
    return 0


def cmd_repair(args: argparse.Namespace) -> None:
    """Repair recipes referencing a raw material."""
    sys.exit(asyncio.run(_repair(args.raw_material_id, args.actor)))


def main() -> None:
    parser = argparse.ArgumentParser(
        description="RMC management CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # serve
    p_serve = sub.add_parser("serve", help="Start the API server")
    p_serve.add_argument("--host", default="0.0.0.0", help="Bind host (default: 0.0.0.0)")
    p_serve.add_argument("--port", type=int, default=8000, help="Bind port (default: 8000)")
    p_serve.add_argument("--reload", action="store_true", help="Reload on code changes")
    p_serve.set_defaults(func=cmd_serve)

    # migrate
    p_migrate = sub.add_parser("migrate", help="Apply pending database migrations")
    p_migrate.add_argument("--no-backup", action="store_true", help="Skip the pre-migration backup")
    p_migrate.set_defaults(func=cmd_migrate)

    # status
    p_status = sub.add_parser("status", help="Show migration status")
    p_status.set_defaults(func=cmd_status)

    # repair
    p_repair = sub.add_parser("repair", help="Repair recipes using a raw material")
    p_repair.add_argument("raw_material_id", type=int, help="Raw material id")
    p_repair.add_argument("--actor", default=None, help="User recorded on logs and snapshots")
    p_repair.set_defaults(func=cmd_repair)

    args = parser.parse_args()
    args.func(args)


if __name__ == "__main__":
    main()
