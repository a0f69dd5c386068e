"""Tests for configuration section models."""

import pytest
from pydantic import ValidationError

from venuecrawl.config.models import CrawlConfig, CrawlerConfig, RetryConfig, SourceConfig
from venuecrawl.domain.types import GatePolicy, SnapshotCadence


class TestDefaults:
    def test_source(self) -> None:
        cfg = SourceConfig()
        assert cfg.base_url == "https://api.foursquare.com/v2"
        assert cfg.client_id == ""
        assert cfg.timeout == 30.0

    def test_root_composes_sections(self) -> None:
        cfg = CrawlerConfig()
        assert cfg.crawl.gate_policy is GatePolicy.ROUND
        assert cfg.snapshot.cadence is SnapshotCadence.POWER_OF_TWO
        assert cfg.retry.assume_yes is False


class TestValidation:
    @pytest.mark.parametrize("field", ["concurrency", "max_iterations"])
    def test_positive_crawl_limits(self, field: str) -> None:
        with pytest.raises(ValidationError):
            CrawlConfig.model_validate({field: 0})

    def test_max_attempts_positive(self) -> None:
        with pytest.raises(ValidationError):
            RetryConfig(max_attempts=0)

    def test_unknown_gate_policy(self) -> None:
        with pytest.raises(ValidationError):
            CrawlConfig.model_validate({"gate_policy": "forever"})

    def test_frozen(self) -> None:
        cfg = CrawlConfig()
        with pytest.raises(ValidationError):
            cfg.concurrency = 2  # type: ignore[misc]
