"""Command line interface for buildkeeper."""

import argparse
import json
import sys
from collections.abc import Sequence
from pathlib import Path

from pydantic import BaseModel

from buildkeeper import __version__
from buildkeeper.config import ConfigManager
from buildkeeper.exceptions import AppBaseError
from buildkeeper.logger import configure_logging, get_logger
from buildkeeper.models.build import BuildRecord
from buildkeeper.services.container import ServiceContainer, build_services
from buildkeeper.services.templates import parse_overrides

logger = get_logger(__name__)


def _emit(items: BaseModel | Sequence[BaseModel], as_json: bool, lines: Sequence[str]) -> None:
    if as_json:
        if isinstance(items, BaseModel):
            print(json.dumps(items.model_dump(mode="json", by_alias=True), indent=2))
        else:
            print(json.dumps([i.model_dump(mode="json", by_alias=True) for i in items], indent=2))
        return
    for line in lines:
        print(line)


def _build_line(record: BuildRecord) -> str:
    marker = "*" if record.is_active else " "
    built = record.build_datetime.strftime("%Y-%m-%d %H:%M:%S")
    return (
        f"{marker} {record.id:>4}  {record.software:<16} {record.git_hash[:12]:<12}  {built}  "
        f"{record.configuration}  {record.install_path}"
    )


def cmd_build(services: ServiceContainer, args: argparse.Namespace) -> int:
    overrides = parse_overrides(args.set or [])
    outcome = services.driver.build(args.software, overrides, use_defaults=not args.no_defaults)
    state = "active" if outcome.activated else "NOT activated"
    _emit(
        outcome,
        args.json,
        [f"Built {outcome.software} {outcome.commit_hash[:12]} (id {outcome.build_id}, {state}) -> {outcome.install_path}"],
    )
    return 0 if outcome.activated else 1


def cmd_templates(services: ServiceContainer, args: argparse.Namespace) -> int:
    store = services.templates
    if args.templates_command == "list":
        templates = store.list_all()
        _emit(
            templates,
            args.json,
            [f"{t.name:<16} {t.build_function:<8} {t.repository}  {t.description}" for t in templates],
        )
    elif args.templates_command == "register":
        template = store.register_file(Path(args.file), overwrite=not args.no_overwrite)
        print(f"Registered template {template.name}")
    elif args.templates_command == "init":
        written = store.install_defaults(overwrite=args.force)
        print(f"Installed templates: {', '.join(written) if written else '(none)'}")
    elif args.templates_command == "migrate":
        changed = store.migrate_build_functions()
        print(f"Migrated templates: {', '.join(changed) if changed else '(none)'}")
    return 0


def cmd_active(services: ServiceContainer, args: argparse.Namespace) -> int:
    if args.active_command == "get":
        record = services.builds.get_active(args.software)
        if record is None:
            print(f"No active build of {args.software}", file=sys.stderr)
            return 1
        _emit(record, args.json, [_build_line(record)])
    elif args.active_command == "set":
        if not services.switch.activate(args.software, args.commit_hash):
            print(f"Failed to activate {args.software} {args.commit_hash}", file=sys.stderr)
            return 1
        print(f"Activated {args.software} {args.commit_hash}")
    elif args.active_command == "list":
        records = services.builds.list_active()
        _emit(records, args.json, [_build_line(r) for r in records])
    return 0


def cmd_history(services: ServiceContainer, args: argparse.Namespace) -> int:
    records = services.builds.history(args.software)
    _emit(records, args.json, [_build_line(r) for r in records])
    return 0


def cmd_repos(services: ServiceContainer, args: argparse.Namespace) -> int:
    if args.repos_command == "list":
        repos = services.repositories.list_all()
        _emit(
            repos,
            args.json,
            [f"{r.software:<16} {r.branch:<12} {(r.current_hash or '')[:12]:<12}  {r.local_path}" for r in repos],
        )
    elif args.repos_command == "remove":
        if not services.tracker.remove(args.software, delete_checkout=args.delete_checkout):
            print(f"Repository {args.software} is not tracked", file=sys.stderr)
            return 1
        print(f"Removed {args.software}")
    return 0


def cmd_serve(services: ServiceContainer, args: argparse.Namespace) -> int:
    from buildkeeper.main import run_server

    run_server(services, host=args.host, port=args.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="buildkeeper",
        description="buildkeeper - build, register and switch source builds",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  buildkeeper templates init                    # Install the bundled templates
  buildkeeper build llvm --set BuildType=Debug  # Build LLVM and activate it
  buildkeeper history llvm                      # Builds of LLVM, newest first
  buildkeeper active set llvm 1a2b3c4d          # Switch the active LLVM build
        """,
    )
    parser.add_argument("--config", metavar="PATH", help="Path to config.yaml")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument("--json", action="store_true", help="Print results as JSON")
    parser.add_argument("--version", action="version", version=f"buildkeeper {__version__}")

    sub = parser.add_subparsers(dest="command", required=True)

    build = sub.add_parser("build", help="Build a software from its template")
    build.add_argument("software")
    build.add_argument("--no-defaults", action="store_true", help="Ignore the template's default configuration")
    build.add_argument("--set", action="append", metavar="KEY=VALUE", help="Override a configuration value")
    build.set_defaults(handler=cmd_build)

    templates = sub.add_parser("templates", help="Manage build templates")
    templates_sub = templates.add_subparsers(dest="templates_command", required=True)
    templates_sub.add_parser("list", help="List templates")
    register = templates_sub.add_parser("register", help="Register a template from a JSON file")
    register.add_argument("file")
    register.add_argument("--no-overwrite", action="store_true", help="Fail if the template exists")
    init = templates_sub.add_parser("init", help="Install the bundled default templates")
    init.add_argument("--force", action="store_true", help="Overwrite existing templates")
    templates_sub.add_parser("migrate", help="Rename legacy build function identifiers")
    templates.set_defaults(handler=cmd_templates)

    active = sub.add_parser("active", help="Show or switch active builds")
    active_sub = active.add_subparsers(dest="active_command", required=True)
    active_get = active_sub.add_parser("get", help="Show the active build of a software")
    active_get.add_argument("software")
    active_set = active_sub.add_parser("set", help="Activate a registered build")
    active_set.add_argument("software")
    active_set.add_argument("commit_hash")
    active_sub.add_parser("list", help="List active builds")
    active.set_defaults(handler=cmd_active)

    history = sub.add_parser("history", help="Show build history")
    history.add_argument("software", nargs="?")
    history.set_defaults(handler=cmd_history)

    repos = sub.add_parser("repos", help="Manage tracked repositories")
    repos_sub = repos.add_subparsers(dest="repos_command", required=True)
    repos_sub.add_parser("list", help="List tracked repositories")
    repos_remove = repos_sub.add_parser("remove", help="Stop tracking a repository")
    repos_remove.add_argument("software")
    repos_remove.add_argument("--delete-checkout", action="store_true", help="Also delete the source checkout")
    repos.set_defaults(handler=cmd_repos)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", help="Host to bind (default from config)")
    serve.add_argument("--port", type=int, help="Port to bind (default from config)")
    serve.set_defaults(handler=cmd_serve)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point with CLI argument parsing."""
    parser = build_parser()
    args = parser.parse_args(argv)

    config = ConfigManager(Path(args.config).expanduser() if args.config else None).load()
    configure_logging("DEBUG" if args.verbose else config.advanced.log_level)

    try:
        services = build_services(config)
        return args.handler(services, args)
    except AppBaseError as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
