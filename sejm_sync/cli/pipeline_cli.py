"""
Command-line interface for the Sejm sync pipeline.

Usage:
    sejm-sync sync --term 10 --modules votings,ballots --last 2
    sejm-sync sync --modules statements --from 40 --to 42 --speed fast
    sejm-sync sync --modules committee_statements --committees ASW,ENM
    sejm-sync export backup.db
    sejm-sync import backup.db
    sejm-sync clear-cache --term 10
    sejm-sync --help
"""

import argparse
import asyncio
import json
import logging
import signal
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError
from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from ..config import settings
from ..db.repositories import SyncMetadataRepository
from ..db.session import Database
from ..models.fetch_models import RequestMetrics
from ..models.sync_models import (
    Chamber,
    PipelineOutcome,
    PipelineResult,
    RangeSelector,
    ResourceKind,
    SpeedProfile,
    SyncConfig,
)
from ..orchestration.cancellation import CancellationToken
from ..orchestration.pipeline import PipelineCallbacks, SyncPipeline

logger = logging.getLogger(__name__)
console = Console()

EXIT_CODES = {
    PipelineOutcome.SUCCESS: 0,
    PipelineOutcome.UP_TO_DATE: 0,
    PipelineOutcome.FAILED: 1,
    PipelineOutcome.ABORTED: 130,
}


def parse_modules(value: str) -> List[ResourceKind]:
    """Parse a comma-separated module list; ``all`` selects every module."""
    if value.strip() == "all":
        return [kind for kind in ResourceKind if kind != ResourceKind.SITTINGS]
    try:
        return [ResourceKind(part.strip()) for part in value.split(",") if part.strip()]
    except ValueError as e:
        choices = ", ".join(k.value for k in ResourceKind if k != ResourceKind.SITTINGS)
        raise argparse.ArgumentTypeError(f"{e}; choose from: {choices}")


def build_config(args: argparse.Namespace) -> SyncConfig:
    if args.from_number is not None or args.to_number is not None:
        selector = RangeSelector.custom(args.from_number, args.to_number)
    else:
        selector = RangeSelector.last_n(args.last)

    return SyncConfig(
        modules=args.modules,
        chamber=args.chamber,
        term=args.term,
        range=selector,
        speed=args.speed,
        committee_codes=args.committees.split(",") if args.committees else None,
        enacted_acts_publisher=args.publisher,
        enacted_acts_year=args.year,
        privacy_filter=not args.no_privacy,
        force=args.force,
    )


def print_result(result: PipelineResult) -> None:
    style = {
        PipelineOutcome.SUCCESS: "bold green",
        PipelineOutcome.UP_TO_DATE: "bold cyan",
        PipelineOutcome.ABORTED: "bold yellow",
        PipelineOutcome.FAILED: "bold red",
    }[result.outcome]
    console.print(f"\n[{style}]Outcome: {result.outcome.value}[/{style}]  ({result.elapsed_seconds:.1f}s)")
    if result.error:
        console.print(f"[red]{result.error}[/red]")

    if result.counts or result.fetched:
        table = Table(title="Rows")
        table.add_column("Table / kind")
        table.add_column("Fetched", justify="right")
        table.add_column("Upserted", justify="right")
        for name in sorted(set(result.counts) | set(result.fetched)):
            fetched = result.fetched.get(name)
            table.add_row(name, "" if fetched is None else str(fetched), str(result.counts.get(name, "")))
        console.print(table)

    requests = result.requests
    if requests:
        console.print(
            f"[dim]Requests: {requests.get('requests', 0)}, retries: {requests.get('retries', 0)}, "
            f"rate-limit waits: {requests.get('rate_limit_waits', 0)}, "
            f"not found: {requests.get('not_found', 0)}, failures: {requests.get('failures', 0)}[/dim]"
        )
    if result.speaker_stats:
        console.print(
            f"[dim]Speakers matched: {result.speaker_stats.get('matched', 0)}, "
            f"unmatched: {result.speaker_stats.get('unmatched', 0)}[/dim]"
        )

    if result.issues:
        console.print(f"\n[yellow]Issues ({len(result.issues)}):[/yellow]")
        for i, issue in enumerate(result.issues[:5], 1):
            console.print(f"  {i}. [{issue.source}] {issue.error_type}: {issue.message}")
        if len(result.issues) > 5:
            console.print(f"  ... and {len(result.issues) - 5} more")


async def run_sync(config: SyncConfig, output_file: Optional[str]) -> int:
    """Run one sync with a live progress bar; Ctrl+C cancels at the next check point."""
    database = Database(settings.db)
    pipeline = SyncPipeline(database=database, settings=settings)
    token = CancellationToken()

    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, token.cancel, "interrupted by user")
    except (NotImplementedError, RuntimeError):
        logger.debug("Signal handlers unavailable; Ctrl+C will not cancel gracefully")

    console.print("\n[bold cyan]Sejm sync[/bold cyan]")
    console.print(
        f"[dim]{config.chamber.value} term {config.term}, modules: "
        f"{', '.join(k.value for k in config.modules)}, speed: {config.speed.value}[/dim]\n"
    )

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("{task.percentage:>3.0f}%"),
            TextColumn("[dim]{task.fields[requests]} req[/dim]"),
            console=console,
        ) as progress:
            task = progress.add_task("Starting", total=100, requests=0)

            def on_progress(pct: float, label: str, metrics: RequestMetrics) -> None:
                progress.update(task, completed=pct, description=label, requests=metrics.requests)

            result = await pipeline.run(
                config,
                callbacks=PipelineCallbacks(on_progress=on_progress),
                cancel_token=token,
            )
    finally:
        try:
            loop.remove_signal_handler(signal.SIGINT)
        except (NotImplementedError, RuntimeError):
            pass
        await database.close()

    print_result(result)

    if output_file:
        output_path = Path(output_file)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(result.model_dump(mode="json"), f, indent=2, ensure_ascii=False)
        console.print(f"\nResults saved to: {output_path.absolute()}")

    return EXIT_CODES[result.outcome]


async def run_export(target: str) -> int:
    database = Database(settings.db)
    await database.initialize()
    try:
        data = await database.export_bytes()
    finally:
        await database.close()

    path = Path(target)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    console.print(f"[green]Exported {len(data)} bytes to {path.absolute()}[/green]")
    return 0


async def run_import(source: str) -> int:
    data = Path(source).read_bytes()
    database = Database(settings.db)
    await database.initialize()
    try:
        await database.import_bytes(data)
    except ValueError as e:
        console.print(f"[bold red]Import rejected: {e}[/bold red]")
        return 1
    finally:
        await database.close()

    console.print(f"[green]Imported {source} into {settings.db.path}[/green]")
    return 0


async def run_clear_cache(chamber: Optional[str], term: Optional[int]) -> int:
    database = Database(settings.db)
    await database.initialize()
    await database.create_tables()
    try:
        async with database.session() as session:
            removed = await SyncMetadataRepository(session).clear(chamber, term)
    finally:
        await database.close()

    console.print(f"[green]Cleared {removed} sync metadata records[/green]")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sejm-sync",
        description="Fetch, cache and normalize Polish parliament open data into SQLite",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Votings and ballots of the two most recent sittings of term 10
  sejm-sync sync --modules votings,ballots --last 2

  # Transcripts of sittings 40-42, faster pacing
  sejm-sync sync --modules statements --from 40 --to 42 --speed fast

  # Everything, ignoring cached sync state
  sejm-sync sync --modules all --force --output run.json
        """,
    )
    parser.add_argument("--db", help=f"SQLite file (default: {settings.db.path})")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging (DEBUG level)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    sync = subparsers.add_parser("sync", help="Fetch and store what the cache lacks")
    sync.add_argument(
        "--modules",
        type=parse_modules,
        default=parse_modules("statements,votings,ballots"),
        help="Comma-separated modules, or 'all' (default: statements,votings,ballots)",
    )
    sync.add_argument("--term", type=int, default=settings.app.default_term)
    sync.add_argument(
        "--chamber",
        type=Chamber,
        choices=list(Chamber),
        default=Chamber.SEJM,
        help="senat syncs votings and ballots only (use --modules votings,ballots)",
    )
    sync.add_argument("--last", type=int, default=1, help="Most recent N sittings (default: 1)")
    sync.add_argument("--from", dest="from_number", type=int, help="First sitting number of a custom range")
    sync.add_argument("--to", dest="to_number", type=int, help="Last sitting number of a custom range")
    sync.add_argument(
        "--speed",
        type=SpeedProfile,
        choices=list(SpeedProfile),
        default=SpeedProfile(settings.app.default_speed),
    )
    sync.add_argument("--committees", help="Comma-separated committee codes (default: all)")
    sync.add_argument("--publisher", default="DU", help="Enacted acts publisher (default: DU)")
    sync.add_argument("--year", type=int, help="Enacted acts year (default: current year)")
    sync.add_argument("--no-privacy", action="store_true", help="Keep personal-data fields")
    sync.add_argument("--force", action="store_true", help="Refetch regardless of sync metadata")
    sync.add_argument("--output", help="Save the run report to a JSON file")

    export = subparsers.add_parser("export", help="Write a consistent copy of the database")
    export.add_argument("target")

    import_ = subparsers.add_parser("import", help="Replace the database with a copy")
    import_.add_argument("source")

    clear = subparsers.add_parser("clear-cache", help="Delete sync metadata so the next run refetches")
    clear.add_argument("--chamber", choices=[c.value for c in Chamber])
    clear.add_argument("--term", type=int)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Main CLI entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.app.log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    if args.db:
        settings.db.path = args.db

    if args.command == "sync":
        try:
            config = build_config(args)
        except ValidationError as e:
            console.print(f"[bold red]Invalid sync configuration:[/bold red]\n{e}")
            raise SystemExit(2)
        exit_code = asyncio.run(run_sync(config, args.output))
    elif args.command == "export":
        exit_code = asyncio.run(run_export(args.target))
    elif args.command == "import":
        exit_code = asyncio.run(run_import(args.source))
    else:
        exit_code = asyncio.run(run_clear_cache(args.chamber, args.term))

    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
