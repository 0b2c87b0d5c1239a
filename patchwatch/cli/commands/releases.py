"""Releases command - show the normalized catalog of one repository."""

from __future__ import annotations

from pathlib import Path

import typer

from patchwatch.cli.context import build_context
from patchwatch.core.errors import ErrorCode
from patchwatch.core.result import Err
from patchwatch.output.console import Style
from patchwatch.releases.normalize import normalize


def releases(
    repository: str = typer.Argument(..., help="Repository as OWNER/REPO."),
    fallback: str | None = typer.Option(
        None,
        "--fallback",
        help="Stop paging at the page holding this tag.",
    ),
    config: Path | None = typer.Option(None, "--config", "-c", help="Config file."),
) -> None:
    """List final releases oldest first, with the version parsed from each tag."""
    owner, sep, repo = repository.partition("/")
    if not sep or not owner or not repo or "/" in repo:
        typer.echo(f"error: expected OWNER/REPO, got {repository!r}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    ctx = build_context(config, require_config=False)
    result = ctx.fetcher().fetch_all(owner, repo, fallback)
    if isinstance(result, Err):
        ctx.console.error(f"could not fetch releases for {owner}/{repo}")
        ctx.console.print(f"  {result.error}", Style.DIM)
        raise typer.Exit(code=int(ErrorCode.NETWORK_ERROR))

    records = normalize(result.value)
    ctx.console.header(f"{owner}/{repo}: {len(records)} release(s)")
    for record in records:
        version = record.version
        line = f"{record.published_at:%Y-%m-%d}  {record.tag_name}"
        if version is None:
            ctx.console.print(f"{line}  (not a version tag)", Style.DIM)
        else:
            ctx.console.print(f"{line}  {version}")
