"""Command-line entry point: download links from a page, or repair names."""

import argparse
import asyncio
import os
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape

from .download import DEFAULT_RUN_TIMEOUT, ConfigError, DownloadError, make_config, run
from .logger import PipelineLogger
from .repair import RepairError, repair_folder

console = Console()


def _env_extensions() -> list[str] | None:
    raw = os.getenv("LINKFETCH_EXT")
    if not raw:
        return None
    return [ext.strip() for ext in raw.split(",") if ext.strip()]


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser.

    Flag defaults come from LINKFETCH_* environment variables (a .env file
    is loaded first), so call this after load_dotenv().
    """
    parser = argparse.ArgumentParser(
        prog="linkfetch",
        description="Download every file linked from an HTML page whose path ends in a given extension.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    download = subparsers.add_parser("download", help="Fetch a page and download matching links")
    download.add_argument(
        "--url",
        default=os.getenv("LINKFETCH_URL"),
        help="HTML URL to download and get links from",
    )
    download.add_argument(
        "--folder",
        default=os.getenv("LINKFETCH_FOLDER"),
        help="Folder to download to (must exist)",
    )
    download.add_argument(
        "--ext",
        action="append",
        dest="extensions",
        help="Limit downloads to this extension; repeat for more (default: .pdf)",
    )
    download.add_argument(
        "--timeout",
        type=float,
        default=os.getenv("LINKFETCH_TIMEOUT", str(DEFAULT_RUN_TIMEOUT)),
        help="Deadline for the whole run in seconds",
    )
    download.add_argument("--log-dir", type=Path, help="Write a markdown report into this directory")

    repair = subparsers.add_parser("repair", help="Decode percent-escaped filenames in a folder")
    repair.add_argument(
        "--folder",
        default=os.getenv("LINKFETCH_FOLDER"),
        help="Folder to repair",
    )
    repair.add_argument("--log-dir", type=Path, help="Write a markdown report into this directory")

    return parser


def cmd_download(args: argparse.Namespace) -> None:
    """Run the download pipeline."""
    config = make_config(
        args.url,
        args.folder,
        extensions=args.extensions or _env_extensions(),
        timeout=args.timeout,
    )
    report = PipelineLogger("download", args.log_dir) if args.log_dir else None

    try:
        results = asyncio.run(run(config, report=report))
    finally:
        if report is not None:
            log_path = report.write({"Seed URL": config.url, "Extensions": ", ".join(config.extensions)})
            console.print(f"[dim]Report written to {log_path}[/dim]")

    console.print(f"\n[green]✓ Downloaded {len(results)} files to {config.folder}[/green]")


def cmd_repair(args: argparse.Namespace) -> None:
    """Run the filename repair pass."""
    if not args.folder:
        raise ConfigError("Invalid configuration: folder: missing folder")

    report = PipelineLogger("repair", args.log_dir) if args.log_dir else None
    try:
        renamed = repair_folder(Path(args.folder), report=report)
    finally:
        if report is not None:
            report.write({"Folder": args.folder})

    console.print(f"[green]✓ Renamed {len(renamed)} entries[/green]")


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    load_dotenv()
    args = build_parser().parse_args(argv)

    handlers = {"download": cmd_download, "repair": cmd_repair}
    try:
        handlers[args.command](args)
    except (ConfigError, DownloadError, RepairError) as e:
        console.print(f"[red bold]Error:[/red bold] {escape(str(e))}")
        raise SystemExit(1) from e
    except KeyboardInterrupt as e:
        console.print("[red bold]Error:[/red bold] interrupted")
        raise SystemExit(1) from e


if __name__ == "__main__":
    main()
