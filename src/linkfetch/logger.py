"""Markdown reports for download and repair runs."""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any


class PipelineLogger:
    """Collect per-link outcomes and write them as a timestamped markdown file."""

    def __init__(self, stage_name: str, log_dir: Path = Path("logs")):
        """Initialize a report for one run.

        Args:
            stage_name: Operation being reported ("download" or "repair")
            log_dir: Directory to write the report into
        """
        self.stage_name = stage_name
        self.log_dir = log_dir
        self.start_time = datetime.now(tz=timezone.utc)

        # YYYY-MM-DD-HH-MM-stage.md
        timestamp = self.start_time.strftime("%Y-%m-%d-%H-%M")
        self.log_path = log_dir / f"{timestamp}-{stage_name}.md"

        self.successful: list[str] = []
        self.failed: list[tuple[str, str]] = []
        self.skipped: list[str] = []

    def log_success(self, item: str, details: str = "") -> None:
        """Record a saved file or a rename."""
        self.successful.append(f"- ✅ {item}: {details}" if details else f"- ✅ {item}")

    def log_failure(self, item: str, error: str) -> None:
        """Record the error that stopped the run."""
        self.failed.append((item, error))

    def log_skip(self, item: str, reason: str = "") -> None:
        """Record a link that was not downloaded."""
        self.skipped.append(f"- ⊘ {item}: {reason}" if reason else f"- ⊘ {item}")

    def write(self, additional_summary: dict[str, Any] | None = None) -> Path:
        """Write the report.

        Args:
            additional_summary: Extra key/value lines for the summary section

        Returns:
            Path to the written report
        """
        end_time = datetime.now(tz=timezone.utc)
        seconds = (end_time - self.start_time).total_seconds()

        lines = [
            f"# {self.stage_name.capitalize()} Report - {self.start_time.strftime('%Y-%m-%d %H:%M:%S')} UTC",
            "",
            f"**Duration:** {seconds:.1f}s",
            "",
            "## Summary",
            f"- ✅ {len(self.successful)} successful",
            f"- ❌ {len(self.failed)} failed",
            f"- ⊘ {len(self.skipped)} skipped",
        ]
        if additional_summary:
            lines.extend(f"- {key}: {value}" for key, value in additional_summary.items())
        lines.append("")

        if self.successful:
            lines += ["## Successful", *self.successful, ""]

        if self.failed:
            lines.append("## Failed")
            for item, error in self.failed:
                lines.append(f"- ❌ {item}")
                lines.extend(f"  {error_line}" for error_line in error.split("\n"))
            lines.append("")

        if self.skipped:
            lines += ["## Skipped", *self.skipped, ""]

        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.log_path.write_text("\n".join(lines), encoding="utf-8")
        return self.log_path
