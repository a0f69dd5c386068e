"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, venuecrawl.toml only contains
overrides. A fresh checkout needs only [source] client_id and client_secret.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from venuecrawl.domain.types import GatePolicy, SnapshotCadence

# --- venuecrawl.toml sections ---


class SourceConfig(BaseModel):
    """[source] section — Foursquare API access."""

    model_config = {"frozen": True}

    base_url: str = "https://api.foursquare.com/v2"
    client_id: str = ""
    client_secret: str = ""
    api_version: str = "20180323"
    timeout: float = 30.0


class CrawlConfig(BaseModel):
    """[crawl] section."""

    model_config = {"frozen": True}

    concurrency: int = Field(default=10, ge=1)
    max_iterations: int | None = Field(default=None, ge=1)
    gate_policy: GatePolicy = GatePolicy.ROUND


class RetryConfig(BaseModel):
    """[retry] section."""

    model_config = {"frozen": True}

    max_attempts: int = Field(default=10, ge=1)
    backoff_multiplier: float = 1.0
    backoff_min: float = 1.0
    backoff_max: float = 30.0
    assume_yes: bool = False


class SnapshotConfig(BaseModel):
    """[snapshot] section."""

    model_config = {"frozen": True}

    output_dir: str = "out"
    cadence: SnapshotCadence = SnapshotCadence.POWER_OF_TWO


class CrawlerConfig(BaseModel):
    """Root configuration composing all sections."""

    model_config = {"frozen": True}

    source: SourceConfig = Field(default_factory=SourceConfig)
    crawl: CrawlConfig = Field(default_factory=CrawlConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    snapshot: SnapshotConfig = Field(default_factory=SnapshotConfig)
