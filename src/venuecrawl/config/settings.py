"""Unified settings — CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``VENUECRAWL_*`` prefix (``__`` for nested sections)
  3. TOML file    — ``venuecrawl.toml`` discovered via walk-up
  4. Code defaults — baked into the section models

Credentials usually arrive through the environment, e.g.
``VENUECRAWL_SOURCE__CLIENT_ID``.
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from venuecrawl.config.discovery import find_config
from venuecrawl.config.models import CrawlConfig, RetryConfig, SnapshotConfig, SourceConfig


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``venuecrawl.toml`` file discovered via walk-up."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# Thread-local storage for TOML path during construction.
_tls = threading.local()


class CrawlSettings(BaseSettings):
    """Unified settings for the venuecrawl CLI.

    Stored on the :class:`~venuecrawl.commands._context.AppContext` at the
    CLI root and read by every command.

    Attributes:
        work_dir: Directory relative output paths resolve against (parent
            of ``venuecrawl.toml``, or CWD if no config found).
        config_path: The TOML file in effect, or None.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "VENUECRAWL_",
        "env_nested_delimiter": "__",
    }

    work_dir: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False
    no_interact: bool = False

    # --- TOML sections ---
    source: SourceConfig = Field(default_factory=SourceConfig)
    crawl: CrawlConfig = Field(default_factory=CrawlConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    snapshot: SnapshotConfig = Field(default_factory=SnapshotConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        work_dir: Path | None = None,
        **cli_flags: Any,
    ) -> CrawlSettings:
        """Construct settings from a CLI invocation.

        Discovers ``venuecrawl.toml`` via walk-up (or explicit
        *config_path*) and merges CLI flags as highest-priority overrides.
        """
        toml_path: Path | None = None
        if config_path:
            p = Path(config_path)
            if p.is_file():
                toml_path = p
        else:
            toml_path = find_config(work_dir)

        resolved = work_dir
        if resolved is None:
            resolved = toml_path.parent if toml_path else Path.cwd()

        _tls.toml_path = toml_path
        try:
            return cls(work_dir=resolved, config_path=toml_path, **cli_flags)
        finally:
            _tls.toml_path = None

    def with_overrides(self, **sections: dict[str, Any]) -> CrawlSettings:
        """Return a copy with per-command option overrides merged into sections.

        ``None`` values are ignored so unset options keep configured values.
        """
        update: dict[str, Any] = {}
        for name, values in sections.items():
            cleaned = {k: v for k, v in values.items() if v is not None}
            if cleaned:
                current = getattr(self, name)
                update[name] = current.model_validate({**current.model_dump(), **cleaned})
        if not update:
            return self
        return self.model_copy(update=update)
