"""CLI interface for Diskcleaner."""

from __future__ import annotations

import json
import logging
import os
import sys
import time
from concurrent.futures import Future
from dataclasses import fields
from pathlib import Path
from typing import Any

import click

from diskcleaner.config import Config, default_config_path
from diskcleaner.core.engine import CleanerEngine
from diskcleaner.core.cleaner import Cleaner
from diskcleaner.core.duplicates import keep_oldest_first
from diskcleaner.models.category import FileCategory
from diskcleaner.models.progress import Cleaning, Complete, Error, FindingDuplicates, ProgressState, Scanning
from diskcleaner.models.scan_result import ScanResult
from diskcleaner.utils import bytes_to_human, format_elapsed

_POLL_INTERVAL = 0.1
_CATEGORY_CHOICE = click.Choice([c.value for c in FileCategory.all()])


def _setup_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _config_path(ctx: click.Context) -> Path:
    return ctx.obj.get("config_path") or default_config_path()


def _load_config(ctx: click.Context) -> Config:
    return Config.load(_config_path(ctx))


def _wait_for(engine: CleanerEngine, future: Future, quiet: bool) -> Complete:
    """Poll the engine's progress channel until the operation finishes.

    Exits the process with status 1 if the operation ended in an error.
    """
    last_line = ""
    while True:
        finished = engine.progress.take_finished()
        if finished is not None:
            break
        if not quiet:
            line = _describe_progress(engine.progress.read())
            if line and line != last_line:
                click.echo(f"\r{line[:100]:100s}", nl=False, err=True)
                last_line = line
        time.sleep(_POLL_INTERVAL)

    if last_line:
        click.echo("", err=True)
    # The future is resolved by now; waiting keeps worker exceptions from going unobserved.
    future.exception()

    if isinstance(finished, Error):
        click.echo(f"{click.style('✗', fg='red')} {finished.message}", err=True)
        sys.exit(1)
    return finished


def _describe_progress(state: ProgressState) -> str:
    match state:
        case Scanning(current_path=path, files_processed=count):
            return f"Scanning… {count:,} files — {path}"
        case FindingDuplicates(total_files=0):
            return "Comparing file sizes…"
        case FindingDuplicates(files_processed=done, total_files=total):
            return f"Hashing… {done:,}/{total:,} files"
        case Cleaning(files_processed=done, total_files=total):
            return f"Cleaning… {done:,}/{total:,} files"
        case _:
            return ""


def _run_scan(engine: CleanerEngine, root: Path, quiet: bool) -> ScanResult:
    future = engine.start_scan(root)
    complete = _wait_for(engine, future, quiet)
    assert complete.scan_result is not None
    return complete.scan_result


def _selected_categories(categories: tuple[str, ...], default_safe: bool) -> set[FileCategory]:
    if categories:
        return {FileCategory(c) for c in categories}
    if default_safe:
        return {c for c in FileCategory.all() if c.is_safe_to_delete}
    return set(FileCategory.all())


def _scan_to_json(result: ScanResult) -> dict[str, Any]:
    return {
        "total_files": result.total_files,
        "total_size": result.total_size,
        "scan_duration": result.scan_duration,
        "files_by_category": {
            category.value: [str(p) for p in paths] for category, paths in result.files_by_category.items()
        },
    }


@click.group()
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug)")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file to use instead of the default location",
)
@click.pass_context
def main(ctx: click.Context, verbose: int, config_path: Path | None) -> None:
    """Diskcleaner — find, group and remove junk files."""
    _setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


# ── categories ───────────────────────────────────────────────────────────

@main.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def categories(as_json: bool) -> None:
    """List file categories and whether they are safe to delete."""
    if as_json:
        data = [
            {"id": c.value, "name": c.label, "description": c.description, "safe_to_delete": c.is_safe_to_delete}
            for c in FileCategory.all()
        ]
        click.echo(json.dumps(data, indent=2))
        return

    for category in FileCategory.all():
        tag = "" if category.is_safe_to_delete else click.style(" [requires confirmation]", fg="yellow")
        click.echo(f"  {click.style(category.value, fg='cyan', bold=True):30s}  {category.label}{tag}")
        click.echo(f"    {category.description}")


# ── scan ─────────────────────────────────────────────────────────────────

@main.command()
@click.argument("root", type=click.Path(path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def scan(ctx: click.Context, root: Path, as_json: bool) -> None:
    """Scan ROOT and group files by category (preview only, never deletes)."""
    with CleanerEngine(_load_config(ctx)) as engine:
        result = _run_scan(engine, root, quiet=as_json)

    if as_json:
        click.echo(json.dumps(_scan_to_json(result), indent=2))
        return

    click.echo()
    for category in FileCategory.all():
        paths = result.files_by_category.get(category)
        if not paths:
            continue
        mark = click.style("✓", fg="green") if category.is_safe_to_delete else click.style("!", fg="yellow")
        click.echo(f"  {mark} {category.label:20s} — {len(paths):,} items")

    click.echo(
        f"\nTotal: {result.total_files:,} files, "
        f"{click.style(bytes_to_human(result.total_size), fg='green', bold=True)} "
        f"(scanned in {format_elapsed(result.scan_duration)})\n"
    )


# ── duplicates ───────────────────────────────────────────────────────────

@main.command()
@click.argument("root", type=click.Path(path_type=Path))
@click.option("--category", "-c", "categories_", multiple=True, type=_CATEGORY_CHOICE, help="Only consider these categories")
@click.option("--clean", "clean_", is_flag=True, help="Remove every copy except the oldest one")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def duplicates(
    ctx: click.Context,
    root: Path,
    categories_: tuple[str, ...],
    clean_: bool,
    yes: bool,
    as_json: bool,
) -> None:
    """Find byte-identical files below ROOT."""
    config = _load_config(ctx)
    with CleanerEngine(config) as engine:
        result = _run_scan(engine, root, quiet=as_json)
        selected = _selected_categories(categories_, default_safe=False) - {FileCategory.EMPTY_FOLDERS}
        files = result.files_in_categories(selected)

        complete = _wait_for(engine, engine.start_find_duplicates(files), quiet=as_json)
        groups = [keep_oldest_first(g) for g in complete.duplicates or []]

        if as_json and not clean_:
            click.echo(json.dumps([[str(p) for p in g] for g in groups], indent=2))
            return

        if not as_json:
            if not groups:
                click.echo("No duplicates found.")
                return
            for group in groups:
                click.echo(f"\n  {click.style(str(group[0]), fg='green')} (kept)")
                for dup in group[1:]:
                    click.echo(f"    {dup}")
            click.echo()

        if not clean_:
            return

        to_remove = [p for g in groups for p in g[1:]]
        if not yes and not as_json:
            size = bytes_to_human(Cleaner.estimate_cleanup_size(to_remove))
            if not click.confirm(f"Remove {len(to_remove):,} duplicate copies ({size})?", default=False):
                click.echo("Aborted.")
                return

        complete = _wait_for(engine, engine.start_clean(to_remove), quiet=as_json)

    _report_cleaned(complete.cleaned_bytes or 0, len(to_remove), config.use_trash, as_json)


# ── clean ────────────────────────────────────────────────────────────────

@main.command()
@click.argument("root", type=click.Path(path_type=Path))
@click.option(
    "--category",
    "-c",
    "categories_",
    multiple=True,
    type=_CATEGORY_CHOICE,
    help="Categories to clean (default: all categories that are safe to delete)",
)
@click.option("--permanent", is_flag=True, help="Delete permanently instead of moving to trash")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.option("--dry-run", is_flag=True, help="Show what would be cleaned without doing it")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def clean(
    ctx: click.Context,
    root: Path,
    categories_: tuple[str, ...],
    permanent: bool,
    yes: bool,
    dry_run: bool,
    as_json: bool,
) -> None:
    """Scan ROOT and remove files in the selected categories."""
    config = _load_config(ctx)
    if permanent:
        config.use_trash = False

    with CleanerEngine(config) as engine:
        result = _run_scan(engine, root, quiet=as_json)
        selected = _selected_categories(categories_, default_safe=True)
        files = result.files_in_categories(selected)

        if not files:
            if as_json:
                click.echo(json.dumps({"status": "nothing_to_clean"}))
            else:
                click.echo("Nothing to clean.")
            return

        estimate = Cleaner.estimate_cleanup_size(files)
        if dry_run:
            if as_json:
                data = {"status": "dry_run", "file_count": len(files), "would_free_bytes": estimate}
                click.echo(json.dumps(data, indent=2))
            else:
                for category in FileCategory.all():
                    if category in selected and result.files_by_category.get(category):
                        click.echo(f"  {category.label:20s} — {len(result.files_by_category[category]):,} items")
                click.echo(f"\nWould free: {bytes_to_human(estimate)}")
                click.echo("(dry run — no files were deleted)")
            return

        if not yes and not as_json:
            risky = sorted(c.label for c in selected if not c.is_safe_to_delete and result.files_by_category.get(c))
            if risky:
                click.echo(click.style(f"Includes categories that need confirmation: {', '.join(risky)}", fg="yellow"))
            how = "Move to trash" if config.use_trash else "Permanently delete"
            if not click.confirm(f"{how} {len(files):,} items ({bytes_to_human(estimate)})?", default=False):
                click.echo("Aborted.")
                return

        complete = _wait_for(engine, engine.start_clean(files), quiet=as_json)

    _report_cleaned(complete.cleaned_bytes or 0, len(files), config.use_trash, as_json)


def _report_cleaned(cleaned_bytes: int, requested: int, use_trash: bool, as_json: bool) -> None:
    if as_json:
        data = {"status": "cleaned", "requested": requested, "freed_bytes": cleaned_bytes, "trash": use_trash}
        click.echo(json.dumps(data, indent=2))
        return
    where = " (moved to trash)" if use_trash else ""
    click.echo(f"\nTotal freed: {click.style(bytes_to_human(cleaned_bytes), fg='green', bold=True)}{where}\n")


# ── config ───────────────────────────────────────────────────────────────

@main.group("config")
def config_group() -> None:
    """Show or change the cleanup policy."""


@config_group.command("show")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def config_show(ctx: click.Context, as_json: bool) -> None:
    """Print the current configuration."""
    data = _load_config(ctx).to_dict()
    if as_json:
        click.echo(json.dumps(data, indent=2))
        return
    click.echo(f"\n  {click.style('File:', bold=True)} {_config_path(ctx)}\n")
    for key, value in data.items():
        if isinstance(value, list):
            value = ", ".join(value) or "(none)"
        click.echo(f"  {key:22s} {value}")
    click.echo()


@config_group.command("set")
@click.argument("key")
@click.argument("value")
@click.pass_context
def config_set(ctx: click.Context, key: str, value: str) -> None:
    """Set KEY to VALUE (lists are comma-separated)."""
    config = _load_config(ctx)
    known = [f.name for f in fields(Config)]
    if key not in known:
        click.echo(f"Unknown setting '{key}'. Known: {', '.join(known)}", err=True)
        sys.exit(1)

    try:
        setattr(config, key, _parse_value(key, value))
    except ValueError as e:
        click.echo(f"Invalid value for {key}: {e}", err=True)
        sys.exit(1)
    config.save(_config_path(ctx))
    click.echo(f"{key} = {value}")


@config_group.command("reset")
@click.pass_context
def config_reset(ctx: click.Context) -> None:
    """Restore the default configuration."""
    Config().save(_config_path(ctx))
    click.echo("Configuration reset to defaults.")


def _parse_value(key: str, raw: str) -> Any:
    default = getattr(Config(), key)
    match default:
        case bool():
            lowered = raw.strip().lower()
            if lowered in ("1", "true", "yes", "on"):
                return True
            if lowered in ("0", "false", "no", "off"):
                return False
            raise ValueError("expected true or false")
        case int():
            number = int(raw)
            if number < 0:
                raise ValueError("must not be negative")
            return number
        case list():
            items = [part.strip() for part in raw.split(",") if part.strip()]
            if key == "excluded_paths":
                return [Path(os.path.expanduser(p)) for p in items]
            return [p if p.startswith(".") else f".{p}" for p in items]
    raise ValueError(f"unsupported setting type for {key}")
