"""Rename downloaded files that still carry percent-escapes in their names."""

from pathlib import Path

from rich.console import Console
from rich.markup import escape

from .logger import PipelineLogger
from .naming import FilenameError, safe_filename, unquote_strict

console = Console()


class RepairError(Exception):
    """Raised when a folder entry cannot be decoded or renamed."""


def repair_folder(folder: Path, report: PipelineLogger | None = None) -> list[tuple[str, str]]:
    """Decode and sanitize every entry name containing '%'.

    Entries are visited in name order. A name containing '%' that decodes
    cleanly always changes, so every such entry is renamed. A second pass
    finds nothing to rename unless a decoded name itself contains an escape
    (e.g. from "%2541").

    Args:
        folder: Download folder to repair
        report: Optional report to record renames in

    Returns:
        List of (old_name, new_name) pairs that were renamed

    Raises:
        RepairError: On the first unreadable folder, bad escape, or failed rename
    """
    try:
        names = sorted(entry.name for entry in folder.iterdir())
    except OSError as e:
        raise RepairError(f"Cannot list {folder}: {e}") from e

    renamed: list[tuple[str, str]] = []
    for name in names:
        if "%" not in name:
            continue

        try:
            new_name = safe_filename(unquote_strict(name))
        except FilenameError as e:
            if report is not None:
                report.log_failure(name, str(e))
            raise RepairError(f"Cannot decode {name!r} in {folder}: {e}") from e

        console.print(escape(f"fix {name!r} -> {new_name!r}"))
        try:
            (folder / name).rename(folder / new_name)
        except OSError as e:
            if report is not None:
                report.log_failure(name, str(e))
            raise RepairError(f"Cannot rename {name!r} to {new_name!r}: {e}") from e

        if report is not None:
            report.log_success(name, new_name)
        renamed.append((name, new_name))

    return renamed
