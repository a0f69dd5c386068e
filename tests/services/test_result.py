"""Tests for ServiceResult and ServiceError."""

import json

import pytest
from pydantic import ValidationError

from venuecrawl.services.result import ServiceError, ServiceResult


class TestServiceResult:
    def test_success_construction(self) -> None:
        result = ServiceResult(ok=True, op="lookup", data={"id": "abc", "label": "Hub"})
        assert result.ok is True
        assert result.warnings == []
        assert result.error is None
        assert result.meta is None

    def test_error_construction(self) -> None:
        error = ServiceError(code="START_LOOKUP_FAILED", message="nope", detail={"node_id": "x"})
        result = ServiceResult(ok=False, op="crawl", error=error)
        assert result.error is not None
        assert result.error.detail == {"node_id": "x"}

    def test_json_serialization(self) -> None:
        result = ServiceResult(ok=True, op="crawl", warnings=["Stopped at the iteration limit (2)"])
        parsed = json.loads(result.model_dump_json())
        assert parsed["warnings"] == ["Stopped at the iteration limit (2)"]
        assert parsed["error"] is None

    def test_frozen(self) -> None:
        result = ServiceResult(ok=True, op="crawl")
        with pytest.raises(ValidationError):
            result.ok = False  # type: ignore[misc]
