"""Check command - look for newer patch releases of every tracked project."""

from __future__ import annotations

import json
from pathlib import Path

import typer

from patchwatch.cli.context import build_context
from patchwatch.core.errors import ErrorCode
from patchwatch.output.console import ConsoleProtocol, Style
from patchwatch.output.errors import check_exit_code, print_fetch_error
from patchwatch.releases.resolver import ScanPolicy
from patchwatch.releases.service import UpdateCheck, resolve_all


def check(
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Config file (default: $PATCHWATCH_CONFIG or ./patchwatch.toml).",
    ),
    scan_all: bool = typer.Option(
        False,
        "--scan-all",
        help="Consider every patch in the catalog, not only the first contiguous run.",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print results as JSON."),
    exit_code: bool = typer.Option(
        False,
        "--exit-code",
        help=f"Exit with {int(ErrorCode.UPDATES_AVAILABLE)} when an update is available.",
    ),
) -> None:
    """Check tracked projects for newer patch releases.

    Config format (TOML):

        [[projects]]
        name = "wadm"
        owner = "wasmCloud"
        repo = "wadm"
        version = "v0.12.2"
        fallback_tag = "v0.12.2"
    """
    ctx = build_context(config)
    if not ctx.config.projects:
        ctx.console.error("no projects configured (add a [[projects]] table)")
        raise typer.Exit(code=int(ErrorCode.CONFIG_ERROR))

    policy = ScanPolicy.SCAN_ALL if scan_all else ctx.config.policy
    checks = resolve_all(ctx.fetcher(), ctx.config.projects, policy=policy)

    if as_json:
        ctx.console.raw(json.dumps([_check_to_json(c) for c in checks], indent=2))
    else:
        for c in checks:
            _print_check(c, ctx.console)

    code = check_exit_code(checks, exit_on_updates=exit_code)
    if code != int(ErrorCode.OK):
        raise typer.Exit(code=code)


def _print_check(check: UpdateCheck, console: ConsoleProtocol) -> None:
    project = check.project
    if check.error is not None:
        print_fetch_error(project, check.error, console)
        return

    update = check.update
    if update is None:
        console.success(f"{project.name} {project.current} is up to date")
        return

    console.print(
        f"{project.name}: patch available {project.current} -> {update.tag_name}",
        Style.WARNING,
    )
    console.print(f"  {update.name} (published {update.published_at:%Y-%m-%d})", Style.DIM)


def _check_to_json(check: UpdateCheck) -> dict[str, object]:
    update = check.update
    error = check.error
    return {
        "project": check.project.name,
        "repository": check.project.slug,
        "current": str(check.project.current),
        "update": update.to_json() if update is not None else None,
        "error": str(error) if error is not None else None,
    }
