import pytest
from pydantic import ValidationError

from models import (
    CompareRequest, OperationSpec, OperationType, PipelineRequest,
    Settings, TerminalOperation
)


class TestOperationSpec:
    """Test validation of adaptor steps"""

    def test_valid_operations(self):
        spec = OperationSpec(type="map", function="  lambda x: x + 1 ")
        assert spec.type == OperationType.MAP
        assert spec.function == "lambda x: x + 1"

        assert OperationSpec(type="take", count=0).count == 0

    def test_map_and_filter_require_function(self):
        for op in ("map", "filter"):
            with pytest.raises(ValidationError):
                OperationSpec(type=op)

    def test_take_requires_non_negative_count(self):
        with pytest.raises(ValidationError):
            OperationSpec(type="take")
        with pytest.raises(ValidationError):
            OperationSpec(type="take", count=-1)

    def test_function_must_be_lambda(self):
        with pytest.raises(ValidationError):
            OperationSpec(type="map", function="__import__('os').getcwd()")

    def test_unknown_operation(self):
        with pytest.raises(ValidationError):
            OperationSpec(type="reverse")


class TestPipelineRequest:
    """Test validation of whole pipelines"""

    def test_defaults(self):
        request = PipelineRequest(data=[1, 2, 3])
        assert request.operations == []
        assert request.terminal == TerminalOperation.LIST

    def test_reduce_and_find_require_function(self):
        for terminal in ("reduce", "find"):
            with pytest.raises(ValidationError):
                PipelineRequest(data=[1], terminal=terminal)

    def test_nth_requires_index(self):
        with pytest.raises(ValidationError):
            PipelineRequest(data=[1], terminal="nth")
        with pytest.raises(ValidationError):
            PipelineRequest(data=[1], terminal="nth", index=-1)
        assert PipelineRequest(data=[1], terminal="nth", index=0).index == 0

    def test_compare_request(self):
        request = CompareRequest(left=[1], right=[2], operator="ge")
        assert request.function is None
        with pytest.raises(ValidationError):
            CompareRequest(left=[1], right=[2], operator="eq")


class TestSettings:
    """Test configuration loaded from the environment"""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("LAZY_MAX_ITEMS", raising=False)
        monkeypatch.delenv("LAZY_LOG_LEVEL", raising=False)
        settings = Settings.from_env()
        assert settings.max_items == 100_000
        assert settings.log_level == "INFO"

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("LAZY_MAX_ITEMS", "50")
        monkeypatch.setenv("LAZY_LOG_LEVEL", "debug")
        settings = Settings.from_env()
        assert settings.max_items == 50
        assert settings.log_level == "DEBUG"

    def test_invalid_values(self, monkeypatch):
        monkeypatch.setenv("LAZY_MAX_ITEMS", "0")
        with pytest.raises(ValidationError):
            Settings.from_env()

        monkeypatch.setenv("LAZY_MAX_ITEMS", "10")
        monkeypatch.setenv("LAZY_LOG_LEVEL", "chatty")
        with pytest.raises(ValidationError):
            Settings.from_env()
