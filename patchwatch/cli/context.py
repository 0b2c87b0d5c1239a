from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from patchwatch.core.config import Config, default_config_path, load_config
from patchwatch.core.errors import ErrorCode
from patchwatch.core.result import Err
from patchwatch.output.console import ConsoleProtocol, RichConsole
from patchwatch.output.errors import print_config_error
from patchwatch.releases.catalog import CatalogFetcher
from patchwatch.tools.http import HttpClient, RealHttpClient


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: Config
    console: ConsoleProtocol
    http: HttpClient

    def fetcher(self) -> CatalogFetcher:
        return CatalogFetcher(
            self.http,
            api_url=self.config.github.api_url,
            per_page=self.config.github.per_page,
        )


def build_context(config_path: Path | None = None, *, require_config: bool = True) -> CLIContext:
    """Load configuration and wire up console and HTTP client.

    Without ``require_config`` a missing default config file falls back to
    defaults; an explicitly given file must always exist.
    """
    console = RichConsole()
    path = config_path or default_config_path()

    if not require_config and config_path is None and not path.exists():
        config = Config()
    else:
        result = load_config(path)
        if isinstance(result, Err):
            print_config_error(result.error, console)
            raise typer.Exit(code=int(ErrorCode.CONFIG_ERROR))
        config = result.value

    return CLIContext(
        config=config,
        console=console,
        http=RealHttpClient(timeout=config.github.timeout),
    )
