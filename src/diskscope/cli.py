"""CLI interface for Diskscope."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import click

from diskscope.config import EngineConfig
from diskscope.core.engine import AnalysisEngine
from diskscope.core.junk import JunkKind
from diskscope.exceptions import DiskscopeError
from diskscope import report
from diskscope.settings import Settings
from diskscope.system import collect_health, disk_usage, list_processes, startup_items
from diskscope.utils import format_elapsed, human_size

_MB = 1024 * 1024


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _load_config() -> EngineConfig:
    return EngineConfig.from_environment(Settings())


def _build_engine() -> AnalysisEngine:
    return AnalysisEngine(_load_config())


def _echo_json(data: object) -> None:
    click.echo(json.dumps(data, indent=2))


def _mb_to_bytes(value: float | None) -> int | None:
    return None if value is None else int(value * _MB)


@click.group()
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug)")
def main(verbose: int) -> None:
    """Diskscope — find out where your disk space went."""
    _setup_logging(verbose)


# ── scan ─────────────────────────────────────────────────────────────────

@main.command()
@click.argument("path", type=click.Path(path_type=Path))
@click.option("--limit", "-n", type=click.IntRange(min=0), default=None, help="Number of largest files to list")
@click.option("--min-size-mb", type=click.FloatRange(min=0), default=None, help="Ignore smaller files in the top list")
@click.option("--stale-days", type=click.IntRange(min=0), default=None, help="Age after which a file counts as stale")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def scan(path: Path, limit: int | None, min_size_mb: float | None, stale_days: int | None, as_json: bool) -> None:
    """Show the largest, oldest and most common files under PATH."""
    engine = _build_engine()
    try:
        result = engine.scan(path, limit=limit, min_size=_mb_to_bytes(min_size_mb), stale_days=stale_days)
    except DiskscopeError as e:
        raise click.ClickException(str(e)) from e

    if as_json:
        _echo_json(report.scan_to_dict(result))
        return

    summary = result.summary
    click.echo(
        f"\n{click.style(str(result.root), bold=True)}: {summary.total_files:,} files, "
        f"{summary.total_dirs:,} directories, "
        f"{click.style(human_size(summary.total_bytes), fg='green', bold=True)} "
        f"({format_elapsed(result.elapsed_seconds)})\n"
    )

    click.echo(click.style("  Largest files", fg="blue", bold=True))
    if not result.top_files:
        click.echo("    (none)")
    for record in result.top_files:
        click.echo(f"    {human_size(record.size_bytes):>10s}  {record.path}")

    click.echo(f"\n{click.style('  By extension', fg='blue', bold=True)}")
    for stat in result.by_extension[:15]:
        click.echo(f"    {stat.extension:15s} {human_size(stat.total_bytes):>10s}  ({stat.file_count:,} files)")
    if len(result.by_extension) > 15:
        click.echo(f"    … and {len(result.by_extension) - 15} more")

    stale_bytes = sum(r.size_bytes for r in result.stale_files)
    more = "+" if result.stale_truncated else ""
    click.echo(
        f"\n  {click.style('Stale files:', fg='blue', bold=True)} {len(result.stale_files):,}{more} "
        f"totaling {human_size(stale_bytes)}\n"
    )


# ── duplicates ───────────────────────────────────────────────────────────

@main.command()
@click.argument("path", type=click.Path(path_type=Path))
@click.option("--min-size-mb", type=click.FloatRange(min=0), default=None, help="Skip files smaller than this")
@click.option("--verify", is_flag=True, help="Confirm groups by hashing full file contents")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def duplicates(path: Path, min_size_mb: float | None, verify: bool, as_json: bool) -> None:
    """Find files under PATH that look identical."""
    engine = _build_engine()
    try:
        result = engine.find_duplicates(path, min_size=_mb_to_bytes(min_size_mb), verify=verify)
    except DiskscopeError as e:
        raise click.ClickException(str(e)) from e

    if as_json:
        _echo_json(report.duplicates_to_dict(result))
        return

    if not result.groups:
        click.echo("No duplicates found.")
        return

    shown = len(result.groups)
    click.echo(
        f"\nFound {result.total_groups} duplicate groups"
        + (f" (showing {shown})" if shown < result.total_groups else "")
        + f", {click.style(human_size(result.total_wasted_bytes), fg='yellow', bold=True)} wasted\n"
    )
    for group in result.groups:
        click.echo(
            f"  {click.style(human_size(group.size_bytes), bold=True)} × {len(group.files)} "
            f"— {human_size(group.wasted_bytes)} wasted"
        )
        for file in group.files:
            click.echo(f"    {file}")
    if not verify:
        click.echo(
            click.style("\nGroups are matched on sampled bytes; use --verify to compare full contents.", fg="bright_black")
        )


# ── junk ─────────────────────────────────────────────────────────────────

@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def junk(as_json: bool) -> None:
    """Show how much space each junk category takes."""
    engine = _build_engine()
    categories = engine.scan_junk()

    if as_json:
        _echo_json(report.junk_to_dict(categories))
        return

    click.echo()
    for category in categories:
        if category.size_bytes > 0:
            click.echo(
                f"  {click.style('✓', fg='green')} {click.style(category.id, fg='cyan', bold=True):30s} "
                f"{category.name:25s} — {click.style(human_size(category.size_bytes), fg='green', bold=True)} "
                f"({len(category.items):,} items)"
            )
        else:
            click.echo(
                f"  {click.style('·', fg='bright_black')} {click.style(category.id, fg='cyan', bold=True):30s} "
                f"{category.name:25s} — nothing to clean"
            )
    total = sum(c.size_bytes for c in categories)
    click.echo(f"\nTotal reclaimable: {click.style(human_size(total), fg='green', bold=True)}\n")


# ── clean ────────────────────────────────────────────────────────────────

@main.command()
@click.argument("category_ids", nargs=-1, required=True)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.option("--dry-run", is_flag=True, help="Show what would be cleaned without doing it")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def clean(category_ids: tuple[str, ...], yes: bool, dry_run: bool, as_json: bool) -> None:
    """Delete the contents of the given junk categories."""
    engine = _build_engine()

    unknown = [cid for cid in category_ids if JunkKind.parse(cid) is None]
    if unknown and not as_json:
        known = ", ".join(k.value for k in JunkKind)
        click.echo(click.style(f"Ignoring unknown categories: {', '.join(unknown)} (known: {known})", fg="yellow"))

    if dry_run or not (yes or as_json):
        selected = {JunkKind.parse(cid) for cid in category_ids} - {None}
        preview = [engine.junk.scan_kind(kind) for kind in JunkKind if kind in selected]
        total = sum(c.size_bytes for c in preview)
        if dry_run:
            if as_json:
                _echo_json({"status": "dry_run", "would_free_bytes": total, "categories": report.junk_to_dict(preview)})
            else:
                for category in preview:
                    click.echo(f"  {category.name:25s} — {human_size(category.size_bytes)}")
                click.echo(f"\nWould free {human_size(total)} (dry run — no files were deleted)")
            return
        if not click.confirm(f"Permanently delete {human_size(total)}?", default=False):
            click.echo("Aborted.")
            return

    result = engine.clean_junk(category_ids)

    if as_json:
        _echo_json(report.clean_to_dict(result))
        return

    click.echo(
        f"\nFreed {click.style(human_size(result.freed_bytes), fg='green', bold=True)} "
        f"({result.deleted_count:,} entries removed)"
    )
    if result.errors:
        click.echo(click.style(f"\n{len(result.errors)} error(s):", fg="yellow"))
        for error in result.errors:
            click.echo(f"  {error}")
    click.echo()


# ── system ───────────────────────────────────────────────────────────────

@main.command()
@click.argument("path", default="/", type=click.Path(exists=True, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def disk(path: Path, as_json: bool) -> None:
    """Show total, used and free space of the filesystem holding PATH."""
    try:
        usage = disk_usage(path)
    except DiskscopeError as e:
        raise click.ClickException(str(e)) from e
    if as_json:
        _echo_json(report.disk_usage_to_dict(usage))
        return
    click.echo(
        f"{path}: {human_size(usage.used_bytes)} used of {human_size(usage.total_bytes)} "
        f"({usage.usage_percent:.1f}%), {click.style(human_size(usage.free_bytes), fg='green', bold=True)} free"
    )


@main.command()
@click.option("--limit", "-n", type=click.IntRange(min=1), default=20, help="Number of processes to show")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def processes(limit: int, as_json: bool) -> None:
    """List the busiest processes."""
    try:
        procs = list_processes(limit)
    except DiskscopeError as e:
        raise click.ClickException(str(e)) from e
    if as_json:
        _echo_json(report.processes_to_dict(procs))
        return
    for p in procs:
        click.echo(f"  {p.pid:>7d}  {p.cpu_percent:5.1f}%  {p.memory_mb:8.1f} MB  {p.name}")


@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def startup(as_json: bool) -> None:
    """List applications started with the desktop session."""
    items = startup_items()
    if as_json:
        _echo_json(report.startup_to_dict(items))
        return
    if not items:
        click.echo("No autostart entries.")
        return
    for item in items:
        state = click.style("enabled", fg="green") if item.enabled else click.style("disabled", fg="bright_black")
        click.echo(f"  {item.name:35s} {item.kind:7s} {state}")


@main.command()
@click.argument("path", default="/", type=click.Path(exists=True, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def health(path: Path, as_json: bool) -> None:
    """Summarise system health as a short list of tips."""
    tips = collect_health(path)
    if as_json:
        _echo_json(report.health_to_dict(tips))
        return
    colors = {"critical": "red", "warning": "yellow", "ok": "green"}
    click.echo()
    for tip in tips:
        click.echo(f"  {click.style(f'{tip.level:9s}', fg=colors.get(tip.level), bold=True)}{tip.message}")
    click.echo()


# ── config ───────────────────────────────────────────────────────────────

@main.group("config")
def config_group() -> None:
    """Read and change persistent settings (e.g. scan.limit, engine.workers)."""


@config_group.command("path")
def config_path() -> None:
    """Print the location of the settings file."""
    click.echo(Settings().path)


@config_group.command("get")
@click.argument("key")
def config_get(key: str) -> None:
    """Print the value stored under KEY as JSON."""
    value = Settings().get(key)
    if value is None:
        raise click.ClickException(f"{key} is not set")
    click.echo(json.dumps(value))


@config_group.command("set")
@click.argument("key")
@click.argument("value")
def config_set(key: str, value: str) -> None:
    """Store VALUE under KEY. VALUE is read as JSON if it parses, else as text."""
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError:
        parsed = value
    try:
        Settings().set(key, parsed)
    except DiskscopeError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"{key} = {json.dumps(parsed)}")


@config_group.command("unset")
@click.argument("key")
def config_unset(key: str) -> None:
    """Remove KEY, restoring its default."""
    try:
        removed = Settings().unset(key)
    except DiskscopeError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"{key} removed" if removed else f"{key} was not set")


# ── service ──────────────────────────────────────────────────────────────

@main.group()
def service() -> None:
    """D-Bus service management."""


@service.command("start")
def service_start() -> None:
    """Start the D-Bus service in foreground."""
    from diskscope.dbus_service import start_service

    click.echo("Starting Diskscope D-Bus service...")
    start_service(_load_config())
