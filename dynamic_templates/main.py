"""
Command line entry point for Dynamic Templates
"""

import argparse
import asyncio
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

from dynamic_templates import __version__
from dynamic_templates.config import get_settings
from dynamic_templates.utils import get_logger, setup_logging

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger

    from dynamic_templates.config.settings import Settings
    from dynamic_templates.obsidian import (
        KnownPathsRegistry,
        TemplateUpdater,
        VaultFileOperations,
    )
    from dynamic_templates.obsidian.template_system import ExpansionResult


@dataclass
class RuntimeContext:
    """Container for runtime components."""

    settings: "Settings"
    vault: "VaultFileOperations"
    registry: "KnownPathsRegistry"
    updater: "TemplateUpdater"


async def build_runtime_context(
    settings: "Settings", logger: "BoundLogger"
) -> RuntimeContext:
    """Wire vault access, the expansion engine and the registry together."""
    from dynamic_templates.obsidian import (
        ExpansionEngine,
        JsonKnownPathsStore,
        KnownPathsRegistry,
        ScriptSandbox,
        TemplateResolver,
        TemplateUpdater,
        VaultFileOperations,
        VaultIndex,
    )

    vault_path = settings.obsidian_vault_path
    if not vault_path.is_dir():
        raise FileNotFoundError(f"Obsidian vault not found: {vault_path}")

    vault = VaultFileOperations(vault_path, exclude_folders=settings.exclude_folders)
    resolver = TemplateResolver(vault)
    sandbox = ScriptSandbox(resolver, vault, index=VaultIndex(vault))
    engine = ExpansionEngine(
        resolver,
        sandbox,
        missing_template_policy=settings.missing_template_policy,
    )

    registry = KnownPathsRegistry(JsonKnownPathsStore(settings.known_paths_location))
    await registry.load()

    logger.info(
        "Runtime ready",
        vault_path=str(vault_path),
        known_notes=len(registry.templated_file_paths),
        known_templates=len(registry.template_paths),
    )
    return RuntimeContext(
        settings=settings,
        vault=vault,
        registry=registry,
        updater=TemplateUpdater(vault, engine, registry),
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dynamic-templates",
        description="Regenerate script-driven template sections in Obsidian notes.",
    )
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "--vault", help="Vault directory (overrides OBSIDIAN_VAULT_PATH)"
    )
    commands = parser.add_subparsers(dest="command", required=True)

    update = commands.add_parser("update", help="Update templates in one note")
    update.add_argument("note", help="Vault-relative path of the note")

    commands.add_parser("update-all", help="Update templates in all notes (slow)")
    commands.add_parser("update-known", help="Update notes known to contain templates")

    insert = commands.add_parser("insert", help="Insert a template section")
    insert.add_argument("note", help="Vault-relative path of the note")
    insert.add_argument("line", type=int, help="0-based line to insert at")
    insert.add_argument("template", help="Template script path")

    known = commands.add_parser("known", help="List known templates")
    known.add_argument("query", nargs="?", default="", help="Filter text")

    return parser


def render_results(console: Console, results: "Sequence[ExpansionResult]") -> None:
    table = Table(title="Template updates")
    table.add_column("Note")
    table.add_column("References", justify="right")
    table.add_column("Errors", justify="right")
    table.add_column("Changed")
    for result in results:
        table.add_row(
            result.source_path,
            str(result.references),
            str(len(result.errors)),
            "yes" if result.changed else "no",
        )
    console.print(table)


async def run_command(
    args: argparse.Namespace, context: RuntimeContext, console: Console
) -> int:
    updater = context.updater

    if args.command == "update":
        result = await updater.update_file(args.note)
        if result is None:
            console.print(f"Note not found: {args.note}")
            return 1
        render_results(console, [result])
    elif args.command == "update-all":
        render_results(console, await updater.update_all())
    elif args.command == "update-known":
        render_results(console, await updater.update_known())
    elif args.command == "insert":
        block = await updater.insert_reference(args.note, args.line, args.template)
        console.print(block, markup=False, highlight=False)
    elif args.command == "known":
        for path in updater.suggest_templates(args.query):
            console.print(path, markup=False, highlight=False)
    return 0


async def main(argv: Sequence[str] | None = None) -> int:
    """Main application entry point."""
    args = build_parser().parse_args(argv)

    settings = get_settings()
    if args.vault:
        from pathlib import Path

        settings = settings.model_copy(update={"obsidian_vault_path": Path(args.vault)})

    setup_logging()
    logger = get_logger("main")
    logger.debug("Starting Dynamic Templates", version=__version__, command=args.command)

    try:
        context = await build_runtime_context(settings, logger)
        return await run_command(args, context, Console())
    except (OSError, ValueError) as exc:
        logger.error("Command failed", command=args.command, error=str(exc))
        return 1


def cli() -> None:
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("\nInterrupted")
        sys.exit(130)


if __name__ == "__main__":
    cli()
