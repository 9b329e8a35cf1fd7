"""
Pydantic Models

Request, response and settings models for describing lazy iterator pipelines
as data and running them over HTTP.
"""

import os
from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, Field, field_validator, model_validator, ConfigDict
from enum import Enum


class OperationType(str, Enum):
    """Adaptor steps a pipeline can apply"""
    MAP = "map"
    FILTER = "filter"
    TAKE = "take"


class TerminalOperation(str, Enum):
    """Operations that consume a pipeline"""
    LIST = "list"
    COUNT = "count"
    REDUCE = "reduce"
    FIND = "find"
    NTH = "nth"


class ComparisonOperator(str, Enum):
    """Lexicographic comparisons between two sequences"""
    LT = "lt"
    LE = "le"
    GT = "gt"
    GE = "ge"
    CMP = "cmp"


def _validate_lambda(v):
    if v is not None:
        v = v.strip()
        if not v.startswith("lambda"):
            raise ValueError("Function must be a lambda expression")
    return v


class OperationSpec(BaseModel):
    """One adaptor step in a pipeline"""
    type: OperationType = Field(..., description="Adaptor to apply")
    function: Optional[str] = Field(
        None,
        description="Lambda expression for map/filter",
        examples=["lambda x: x * 2"]
    )
    count: Optional[int] = Field(
        None,
        description="Maximum number of elements for take",
        ge=0
    )

    @field_validator('function')
    @classmethod
    def validate_function(cls, v):
        return _validate_lambda(v)

    @model_validator(mode='after')
    def validate_arguments(self):
        """map/filter need a function; take needs a count."""
        if self.type in (OperationType.MAP, OperationType.FILTER) and not self.function:
            raise ValueError(f"{self.type.value} requires a function")
        if self.type == OperationType.TAKE and self.count is None:
            raise ValueError("take requires a count")
        return self


class PipelineRequest(BaseModel):
    """Source data, adaptor chain and terminal operation"""
    data: List[Any] = Field(..., description="Source sequence")
    operations: List[OperationSpec] = Field(
        default_factory=list,
        description="Adaptors applied in order"
    )
    terminal: TerminalOperation = Field(
        TerminalOperation.LIST,
        description="How the pipeline is consumed"
    )
    function: Optional[str] = Field(
        None,
        description="Lambda for reduce (acc, x) or find (x)",
        examples=["lambda acc, x: acc + x"]
    )
    initial: Optional[Any] = Field(None, description="Initial accumulator for reduce")
    index: Optional[int] = Field(None, description="Position for nth (0-indexed)", ge=0)

    @field_validator('function')
    @classmethod
    def validate_function(cls, v):
        return _validate_lambda(v)

    @model_validator(mode='after')
    def validate_terminal_arguments(self):
        """Enforce the arguments each terminal operation needs."""
        if self.terminal in (TerminalOperation.REDUCE, TerminalOperation.FIND) and not self.function:
            raise ValueError(f"{self.terminal.value} requires a function")
        if self.terminal == TerminalOperation.NTH and self.index is None:
            raise ValueError("nth requires an index")
        return self

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "data": [0, 1, 2, 3, 5, 13, 15, 16, 17, 19],
                "operations": [
                    {"type": "filter", "function": "lambda x: x % 2 == 1"},
                    {"type": "take", "count": 3}
                ],
                "terminal": "list"
            }
        }
    )


class CompareRequest(BaseModel):
    """Two sequences and the comparison to run between them"""
    left: List[Any] = Field(..., description="Left-hand sequence")
    right: List[Any] = Field(..., description="Right-hand sequence")
    operator: ComparisonOperator = Field(..., description="Comparison to run")
    function: Optional[str] = Field(
        None,
        description="Comparator lambda (a, b) for cmp; defaults to natural ordering",
        examples=["lambda a, b: len(a) - len(b)"]
    )

    @field_validator('function')
    @classmethod
    def validate_function(cls, v):
        return _validate_lambda(v)


class PerformanceInfo(BaseModel):
    """Timing and memory of one evaluation"""
    processing_time_ms: float = Field(..., description="Wall time in milliseconds", ge=0)
    memory_usage_mb: float = Field(..., description="Peak traced memory in MB", ge=0)
    input_size: int = Field(..., description="Number of source elements", ge=0)
    output_size: Optional[int] = Field(None, description="Number of elements produced", ge=0)


class PipelineResponse(BaseModel):
    """Result of running a pipeline"""
    ok: bool = Field(True, description="Processing success status")
    terminal: TerminalOperation = Field(..., description="Terminal operation that ran")
    result: Any = Field(None, description="Value produced by the terminal operation")
    found: bool = Field(True, description="False when find/nth ran out of elements")
    stopped: bool = Field(False, description="True when reduce was stopped early")
    operations_applied: List[str] = Field(default_factory=list)
    performance: PerformanceInfo


class CompareResponse(BaseModel):
    """Result of comparing two sequences"""
    ok: bool = Field(True, description="Processing success status")
    operator: ComparisonOperator
    result: Union[bool, int] = Field(..., description="Boolean for lt/le/gt/ge, -1/0/1 for cmp")


class ErrorResponse(BaseModel):
    """Error payload"""
    ok: bool = Field(False)
    error: str = Field(..., description="Error message")
    error_code: str = Field(..., description="Machine readable error code")
    timestamp: str = Field(..., description="Error timestamp in ISO format")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error details")


class HealthCheckResponse(BaseModel):
    """Service health"""
    status: str = Field(..., description="Health status")
    timestamp: str = Field(..., description="Check timestamp in ISO format")
    max_items: int = Field(..., description="Configured source size limit")


class Settings(BaseModel):
    """Runtime configuration, read from the environment"""
    max_items: int = Field(100_000, description="Largest accepted source sequence", ge=1)
    log_level: str = Field("INFO", description="Logging level name")

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        level = v.strip().upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Invalid log level: {v}")
        return level

    @classmethod
    def from_env(cls) -> "Settings":
        values: Dict[str, Any] = {}
        if os.environ.get("LAZY_MAX_ITEMS"):
            values["max_items"] = os.environ["LAZY_MAX_ITEMS"]
        if os.environ.get("LAZY_LOG_LEVEL"):
            values["log_level"] = os.environ["LAZY_LOG_LEVEL"]
        return cls(**values)
