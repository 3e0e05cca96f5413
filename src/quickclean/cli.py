"""CLI interface for quickclean."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click

from quickclean.core import fileops
from quickclean.core.engine import QuickCleanEngine
from quickclean.core.errors import CleanerError, OperationNotAllowed
from quickclean.layout import Layout
from quickclean.models.clean_result import CleanResult
from quickclean.models.entries import FileCategory
from quickclean.scanners import CacheScanner, DeveloperScanner, DuplicateScanner, LargeFileScanner, OrphanScanner
from quickclean.scanners.caches import is_safe_to_delete
from quickclean.settings import Settings
from quickclean.utils import bytes_to_human, mib


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


class _Context:
    def __init__(self, layout: Layout | None = None, settings: Settings | None = None) -> None:
        self.settings = settings or Settings()
        self.layout = layout or Layout.current()

    def engine(self) -> QuickCleanEngine:
        return QuickCleanEngine.create(
            self.layout,
            use_trash=self.settings.use_trash,
            large_file_min_size=mib(self.settings.large_file_min_size_mb),
            duplicate_min_size=mib(self.settings.duplicate_min_size_mb),
        )


pass_context = click.make_pass_decorator(_Context, ensure=True)


def _echo_json(data) -> None:
    click.echo(json.dumps(data, indent=2))


def _row(label: str, size: int, extra: str = "") -> None:
    size_str = click.style(f"{bytes_to_human(size):>10s}", fg="green", bold=True)
    click.echo(f"  {size_str}  {label}{extra}")


@click.group()
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug)")
@click.pass_context
def main(ctx: click.Context, verbose: int) -> None:
    """quickclean — find and reclaim disk space."""
    _setup_logging(verbose)
    ctx.ensure_object(_Context)


# ── scan ─────────────────────────────────────────────────────────────────

@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@pass_context
def scan(obj: _Context, as_json: bool) -> None:
    """Run every scanner in parallel and show what can be reclaimed."""
    engine = obj.engine()

    if not as_json:
        click.echo(f"\n{click.style('🔍', bold=True)} Scanning {len(engine.scanners)} areas...\n")

    summaries = engine.quick_scan()
    disk = engine.disk_usage()
    total = engine.total_reclaimable(summaries)

    if as_json:
        _echo_json({
            "disk_usage": disk.to_dict(),
            "total_reclaimable": total,
            "scanners": {sid: s.to_dict() for sid, s in summaries.items()},
        })
        return

    for summary in summaries.values():
        if summary.error:
            click.echo(f"  {click.style('✗', fg='red')} {summary.scanner_name:25s} — error during scan")
        elif summary.total_bytes > 0:
            click.echo(
                f"  {click.style('✓', fg='green')} {summary.scanner_name:25s} — "
                f"{click.style(bytes_to_human(summary.total_bytes), fg='green', bold=True)} "
                f"({len(summary.entries):,} items)"
            )
        else:
            click.echo(f"  {click.style('·', fg='bright_black')} {summary.scanner_name:25s} — nothing found")

    click.echo(f"\nTotal reclaimable: {click.style(bytes_to_human(total), fg='green', bold=True)}")
    if disk.total_bytes:
        click.echo(
            f"Disk: {bytes_to_human(disk.used_bytes)} used of {bytes_to_human(disk.total_bytes)} "
            f"({disk.used_percentage:.0f}%), {bytes_to_human(disk.free_bytes)} free"
        )
    click.echo()


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@pass_context
def caches(obj: _Context, as_json: bool) -> None:
    """List user and system caches."""
    entries = CacheScanner(obj.layout).scan()
    if as_json:
        _echo_json([e.to_dict() for e in entries])
        return
    for e in entries:
        unsafe = click.style(" [keep]", fg="yellow") if not e.is_safe_to_delete else ""
        _row(f"{e.name} ({e.cache_type.value})", e.size, unsafe)


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@pass_context
def developer(obj: _Context, as_json: bool) -> None:
    """List developer tool caches."""
    scanner = DeveloperScanner(obj.layout)
    entries = [c for c in scanner.scan() if c.exists]
    if as_json:
        _echo_json([e.to_dict() for e in entries])
        return
    if not entries:
        click.echo("No developer caches found.")
        return
    for e in entries:
        guard = "" if e.safe_to_clean else click.style(" [not cleanable here]", fg="yellow")
        _row(f"{e.name}  {click.style(str(e.path), fg='bright_black')}", e.size, guard)


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@pass_context
def orphans(obj: _Context, as_json: bool) -> None:
    """List leftovers of uninstalled applications."""
    entries = OrphanScanner(obj.layout).scan()
    if as_json:
        _echo_json([e.to_dict() for e in entries])
        return
    for e in entries:
        _row(f"{e.possible_app_name}  {click.style(str(e.path), fg='bright_black')}", e.size)


@main.command()
@click.argument("directories", nargs=-1, type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--min-size", type=float, default=None, help="Minimum size in MB")
@click.option(
    "--category", "categories", multiple=True,
    type=click.Choice([c.value for c in FileCategory]), help="Only these categories",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@pass_context
def large(
    obj: _Context,
    directories: tuple[Path, ...],
    min_size: float | None,
    categories: tuple[str, ...],
    as_json: bool,
) -> None:
    """List large files, in DIRECTORIES or in the usual user folders."""
    threshold = mib(obj.settings.large_file_min_size_mb if min_size is None else min_size)
    allowed = [FileCategory(c) for c in categories] or None
    scanner = LargeFileScanner(obj.layout)

    if directories:
        found: dict[Path, object] = {}
        for directory in directories:
            for f in scanner.scan(directory, threshold, allowed):
                found.setdefault(f.path, f)
        entries = sorted(found.values(), key=lambda f: f.size, reverse=True)
    else:
        entries = scanner.scan_common(threshold, allowed)

    if as_json:
        _echo_json([e.to_dict() for e in entries])
        return
    for e in entries:
        _row(f"{e.path}  ({e.category.value})", e.size)


@main.command()
@click.argument("directories", nargs=-1, type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--min-size", type=float, default=None, help="Minimum size in MB")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@pass_context
def duplicates(obj: _Context, directories: tuple[Path, ...], min_size: float | None, as_json: bool) -> None:
    """List duplicate files, in DIRECTORIES or in the usual user folders."""
    threshold = mib(obj.settings.duplicate_min_size_mb if min_size is None else min_size)
    scanner = DuplicateScanner(obj.layout)
    groups = scanner.scan_many(directories, threshold) if directories else scanner.scan_common(threshold)

    if as_json:
        _echo_json([g.to_dict() for g in groups])
        return
    if not groups:
        click.echo("No duplicates found.")
        return
    for group in groups:
        _row(f"{group.duplicate_count + 1} copies of {group.original.name}", group.total_wasted)
        for f in group.files:
            click.echo(f"              {click.style(str(f.path), fg='bright_black')}")
    click.echo(f"\nWasted: {click.style(bytes_to_human(scanner.total_wasted()), fg='green', bold=True)}\n")


# ── delete / clean ───────────────────────────────────────────────────────

def _check_guards(layout: Layout, developer: DeveloperScanner, path: Path) -> None:
    """Refuse the locations the scanners refuse: guarded data and unsafe caches."""
    if not fileops.exists(path):
        return
    if developer.is_guarded(path):
        raise OperationNotAllowed(path, layout.guarded_location.description)
    if path.parent in (layout.user_cache_root, layout.system_cache_root) and not is_safe_to_delete(path.name):
        raise OperationNotAllowed(path, "Refusing to remove a system-critical cache")


@main.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(path_type=Path))
@click.option("--permanent", is_flag=True, help="Delete instead of moving to the trash")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@pass_context
def delete(obj: _Context, paths: tuple[Path, ...], permanent: bool, yes: bool, as_json: bool) -> None:
    """Move PATHS to the trash (or delete them with --permanent)."""
    use_trash = obj.settings.use_trash and not permanent
    if not yes and not as_json:
        verb = "Move to trash" if use_trash else "Permanently delete"
        if not click.confirm(f"{verb} {len(paths)} item(s)?", default=False):
            click.echo("Aborted.")
            return

    developer = DeveloperScanner(obj.layout)
    result = CleanResult(scanner_id="cli")
    for path in paths:
        path = path.absolute()
        size = fileops.allocated_size(path)
        try:
            _check_guards(obj.layout, developer, path)
            fileops.remove(path, use_trash=use_trash)
        except CleanerError as exc:
            result.errors.append(str(exc))
            if not as_json:
                click.echo(f"  {click.style('!', fg='yellow')} {exc}")
            continue
        result.freed_bytes += size
        result.files_removed += 1
        result.removed.append(path)
        if not as_json:
            click.echo(f"  {click.style('✓', fg='green')} {path}")

    if as_json:
        _echo_json(result.to_dict())
    else:
        click.echo(f"\nFreed: {click.style(bytes_to_human(result.freed_bytes), fg='green', bold=True)}\n")
    if result.errors:
        sys.exit(1)


@main.command("clean-dev")
@click.argument("path", type=click.Path(path_type=Path))
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@pass_context
def clean_dev(obj: _Context, path: Path, yes: bool) -> None:
    """Empty a developer cache directory, keeping the directory."""
    if not yes and not click.confirm(f"Remove everything inside {path}?", default=False):
        click.echo("Aborted.")
        return
    try:
        freed = DeveloperScanner(obj.layout).clean_cache(path)
    except CleanerError as exc:
        click.echo(f"{click.style('Error:', fg='red')} {exc}", err=True)
        sys.exit(1)
    click.echo(f"Freed: {click.style(bytes_to_human(freed), fg='green', bold=True)}")


@main.command()
@click.argument("path", type=click.Path(exists=True, path_type=Path))
def reveal(path: Path) -> None:
    """Show PATH in the desktop file browser."""
    fileops.reveal(path)


# ── config ───────────────────────────────────────────────────────────────

@main.group()
def config() -> None:
    """Read and change settings."""


@config.command("get")
@click.argument("key")
@pass_context
def config_get(obj: _Context, key: str) -> None:
    """Print the value of KEY, e.g. duplicates.min_size_mb."""
    value = obj.settings.get(key)
    if value is None:
        click.echo(f"Unknown setting '{key}'.", err=True)
        sys.exit(1)
    click.echo(json.dumps(value))


@config.command("set")
@click.argument("key")
@click.argument("value")
@pass_context
def config_set(obj: _Context, key: str, value: str) -> None:
    """Set KEY to VALUE (parsed as JSON when possible)."""
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError:
        parsed = value
    obj.settings.set(key, parsed)


# ── service ──────────────────────────────────────────────────────────────

@main.group()
def service() -> None:
    """D-Bus service management."""


@service.command("start")
def service_start() -> None:
    """Start the D-Bus service in foreground."""
    from quickclean.dbus_service import start_service

    click.echo("Starting quickclean D-Bus service...")
    start_service()
