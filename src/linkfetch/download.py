"""Download every link on a seed page whose path ends in a wanted extension."""

from pathlib import Path

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from rich.console import Console
from rich.markup import escape

from .fetch import Deadline, FetchError, fetch_bytes, fetch_to, resolve_target
from .links import LinkError, extract_links, matches_extension
from .logger import PipelineLogger
from .naming import FilenameError, filename_for

console = Console()

DEFAULT_EXTENSIONS = [".pdf"]
DEFAULT_RUN_TIMEOUT = 10.0
WRITE_BUFFER_SIZE = 64 * 1024


class ConfigError(Exception):
    """Raised when the run configuration is incomplete or invalid."""


class DownloadError(Exception):
    """Raised when any step of a download run fails."""


class RunConfig(BaseModel):
    """Inputs for one download run."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(description="Seed page to scan for links")
    folder: Path = Field(description="Existing directory downloads are written to")
    extensions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXTENSIONS),
        min_length=1,
        description="Suffixes compared against the lower-cased href, in order",
    )
    timeout: float = Field(default=DEFAULT_RUN_TIMEOUT, gt=0, description="Deadline for the whole run in seconds")

    @field_validator("url")
    @classmethod
    def url_must_be_set(cls, v: str) -> str:
        """Reject an empty seed URL."""
        if not v or not v.strip():
            raise ValueError("missing url")
        return v

    @field_validator("folder", mode="before")
    @classmethod
    def folder_must_be_set(cls, v: object) -> object:
        """Reject an empty folder before Path() turns it into '.'."""
        if v is None or not str(v).strip():
            raise ValueError("missing folder")
        return v


class DownloadResult(BaseModel):
    """A link that was saved to disk."""

    href: str
    url: str
    path: Path
    size: int


def make_config(
    url: str | None,
    folder: str | Path | None,
    extensions: list[str] | None = None,
    timeout: float = DEFAULT_RUN_TIMEOUT,
) -> RunConfig:
    """Build a RunConfig, turning validation failures into ConfigError.

    Args:
        url: Seed page URL
        folder: Download directory
        extensions: Suffixes to accept (defaults to .pdf)
        timeout: Run deadline in seconds

    Returns:
        Validated configuration

    Raises:
        ConfigError: If url or folder is missing, or a value is invalid
    """
    try:
        return RunConfig(
            url=url or "",
            folder=folder or "",
            extensions=extensions or list(DEFAULT_EXTENSIONS),
            timeout=timeout,
        )
    except ValidationError as e:
        problems = "; ".join(f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors())
        raise ConfigError(f"Invalid configuration: {problems}") from e


async def download_link(
    client: httpx.AsyncClient,
    config: RunConfig,
    href: str,
    deadline: Deadline | None = None,
) -> DownloadResult:
    """Download one href into the configured folder.

    The filename comes from the last segment of the unresolved href. An
    existing file with that name is overwritten.

    Args:
        client: HTTP client
        config: Run configuration (its url is the base for relative hrefs)
        href: Raw href value
        deadline: Optional run deadline

    Returns:
        DownloadResult for the saved file

    Raises:
        DownloadError: If the name cannot be decoded, the file cannot be
            created or written, or the fetch fails
    """
    url = resolve_target(config.url, href)

    try:
        filename = filename_for(href)
    except FilenameError as e:
        raise DownloadError(f"Cannot build filename for {href!r}: {e}") from e

    save_path = config.folder / filename

    try:
        f = save_path.open("wb", buffering=WRITE_BUFFER_SIZE)
    except OSError as e:
        raise DownloadError(f"Cannot create {save_path}: {e}") from e

    # Flush before close so a failed write surfaces as DownloadError
    try:
        with f:
            size = await fetch_to(client, config.url, href, f, deadline)
            f.flush()
    except FetchError as e:
        raise DownloadError(f"Failed to download {href!r}: {e}") from e
    except OSError as e:
        raise DownloadError(f"Failed writing {save_path}: {e}") from e

    return DownloadResult(href=href, url=url, path=save_path, size=size)


async def run(
    config: RunConfig,
    client: httpx.AsyncClient | None = None,
    report: PipelineLogger | None = None,
) -> list[DownloadResult]:
    """Fetch the seed page and download every matching link, in order.

    Stops at the first error; links after the failing one are never requested.

    Args:
        config: Run configuration
        client: HTTP client to use (one is created and closed if omitted)
        report: Optional report to record outcomes in

    Returns:
        Saved files in document order

    Raises:
        DownloadError: On the first failure of any step
    """
    deadline = Deadline(config.timeout)

    if not config.folder.is_dir():
        raise DownloadError(f"Download folder not found: {config.folder}")

    if client is not None:
        return await _run(client, config, deadline, report)

    async with httpx.AsyncClient(follow_redirects=True) as owned_client:
        return await _run(owned_client, config, deadline, report)


async def _run(
    client: httpx.AsyncClient,
    config: RunConfig,
    deadline: Deadline,
    report: PipelineLogger | None,
) -> list[DownloadResult]:
    try:
        html = await fetch_bytes(client, config.url, deadline)
        hrefs = extract_links(html)
    except (FetchError, LinkError) as e:
        if report is not None:
            report.log_failure(config.url, str(e))
        raise DownloadError(f"Failed to read seed page {config.url}: {e}") from e

    console.print(f"[bold]Found {len(hrefs)} links on {escape(config.url)}[/bold]")

    results: list[DownloadResult] = []
    for href in hrefs:
        if matches_extension(href, config.extensions) is None:
            if report is not None:
                report.log_skip(href, "extension not wanted")
            continue

        console.print(f"[cyan]↓[/cyan] {escape(href)}")
        try:
            result = await download_link(client, config, href, deadline)
        except DownloadError as e:
            console.print(f"[red]✗[/red] {escape(href)}: {escape(str(e))}")
            if report is not None:
                report.log_failure(href, str(e))
            raise

        console.print(f"  [green]✓[/green] {escape(result.path.name)} ({result.size} bytes)")
        if report is not None:
            report.log_success(result.path.name, result.url)
        results.append(result)

    return results
