"""
Utility functions for building and running lazy iterator pipelines.

This module turns pipeline descriptions (see models.py) into adaptor chains,
runs them, and measures the time and memory each evaluation takes.
"""

import ast
import gc
import time
import logging
import threading
import tracemalloc
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator as TypingIterator, List, Optional

from lazy import EXHAUSTED, Continue, Iterator, SequenceIterator, Stop
from models import (
    CompareRequest, CompareResponse, ComparisonOperator, OperationSpec,
    OperationType, PerformanceInfo, PipelineRequest, PipelineResponse,
    Settings, TerminalOperation
)

settings = Settings.from_env()

# Configure logging
logging.basicConfig(level=getattr(logging, settings.log_level))
logger = logging.getLogger(__name__)


# Builtins visible to user lambdas
SAFE_BUILTINS = {
    "abs": abs, "all": all, "any": any, "bool": bool, "float": float,
    "int": int, "len": len, "max": max, "min": min, "round": round,
    "str": str, "sum": sum, "isinstance": isinstance,
}

# Lets reduce lambdas end a fold early
FOLD_RESULTS = {"Stop": Stop, "Continue": Continue}

# tracemalloc is process-wide
_tracing_lock = threading.Lock()


class PipelineError(Exception):
    """Raised for pipeline descriptions that cannot be built or run"""

    def __init__(self, error_code: str, message: str):
        super().__init__(message)
        self.error_code = error_code
        self.message = message


def _check_expression(tree: ast.Expression, expression: str) -> None:
    """Reject anything but a lambda that stays away from private names"""
    if not isinstance(tree.body, ast.Lambda):
        raise PipelineError("INVALID_FUNCTION", f"Not a lambda expression: {expression!r}")

    for node in ast.walk(tree):
        if isinstance(node, ast.Attribute) and node.attr.startswith("_"):
            name = node.attr
        elif isinstance(node, ast.Name) and node.id.startswith("_"):
            name = node.id
        elif isinstance(node, ast.arg) and node.arg.startswith("_"):
            name = node.arg
        elif isinstance(node, ast.Constant) and isinstance(node.value, str) and "__" in node.value:
            name = node.value
        else:
            continue
        raise PipelineError("FORBIDDEN_NAME", f"Private name {name!r} not allowed in {expression!r}")


def compile_function(expression: str) -> Callable:
    """Compile a lambda expression string into a callable"""
    expression = expression.strip()
    try:
        tree = ast.parse(expression, mode="eval")
    except SyntaxError as e:
        raise PipelineError("INVALID_FUNCTION", f"Could not compile {expression!r}: {e.msg}") from e

    _check_expression(tree, expression)
    code = compile(tree, "<pipeline>", "eval")
    fn = eval(code, {"__builtins__": SAFE_BUILTINS, **FOLD_RESULTS}, {})

    if not callable(fn):
        raise PipelineError("INVALID_FUNCTION", f"Expression is not callable: {expression!r}")
    return fn


def natural_compare(a: Any, b: Any) -> int:
    """Comparator following the values' own ordering"""
    return (a > b) - (a < b)


def build_pipeline(data: List[Any], operations: List[OperationSpec]) -> Iterator:
    """Wrap ``data`` in a source iterator and apply each operation as an adaptor"""
    it: Iterator = SequenceIterator(data)
    for op in operations:
        if op.type == OperationType.MAP:
            it = it.map(compile_function(op.function))
        elif op.type == OperationType.FILTER:
            it = it.filter(compile_function(op.function))
        elif op.type == OperationType.TAKE:
            it = it.take(op.count)
        else:
            raise PipelineError("UNKNOWN_OPERATION", f"Unknown op: {op.type}")
    return it


@contextmanager
def track_resources() -> TypingIterator[Dict[str, float]]:
    """Measure wall time and peak traced memory of the enclosed block"""
    metrics: Dict[str, float] = {}
    with _tracing_lock:
        gc.collect()
        started_here = not tracemalloc.is_tracing()
        if started_here:
            tracemalloc.start()
        baseline, _ = tracemalloc.get_traced_memory()
        start_time = time.perf_counter()
        try:
            yield metrics
        finally:
            metrics["processing_time_ms"] = (time.perf_counter() - start_time) * 1000
            _, peak = tracemalloc.get_traced_memory()
            metrics["memory_usage_mb"] = max(peak - baseline, 0) / 1024 / 1024
            if started_here:
                tracemalloc.stop()


def _check_size(name: str, data: List[Any], limits: Settings) -> None:
    if len(data) > limits.max_items:
        raise PipelineError(
            "INPUT_TOO_LARGE",
            f"{name} has {len(data)} items; limit is {limits.max_items}"
        )


def run_pipeline(request: PipelineRequest, limits: Optional[Settings] = None) -> PipelineResponse:
    """Build the pipeline described by ``request`` and consume it"""
    limits = limits or settings
    _check_size("data", request.data, limits)

    it = build_pipeline(request.data, request.operations)
    terminal_fn = compile_function(request.function) if request.function else None
    operations_applied = [op.type.value for op in request.operations]
    logger.debug(f"Running pipeline {operations_applied} -> {request.terminal.value}")

    found = True
    stopped = False
    output_size: Optional[int] = None

    with track_resources() as metrics:
        if request.terminal == TerminalOperation.LIST:
            result = it.to_list()
            output_size = len(result)
        elif request.terminal == TerminalOperation.COUNT:
            result = it.count()
            output_size = result
        elif request.terminal == TerminalOperation.REDUCE:
            result = it.reduce(request.initial, terminal_fn)
            if isinstance(result, Stop):
                stopped = True
                result = result.value
        elif request.terminal == TerminalOperation.FIND:
            result = it.find(terminal_fn)
        elif request.terminal == TerminalOperation.NTH:
            result = it.nth(request.index)
        else:
            raise PipelineError("UNKNOWN_TERMINAL", f"Unknown terminal: {request.terminal}")

    if result is EXHAUSTED:
        found = False
        result = None

    performance = PerformanceInfo(
        processing_time_ms=metrics["processing_time_ms"],
        memory_usage_mb=metrics["memory_usage_mb"],
        input_size=len(request.data),
        output_size=output_size
    )
    logger.info(
        f"Pipeline {operations_applied} -> {request.terminal.value} "
        f"finished in {performance.processing_time_ms:.2f}ms"
    )

    return PipelineResponse(
        terminal=request.terminal,
        result=result,
        found=found,
        stopped=stopped,
        operations_applied=operations_applied,
        performance=performance
    )


def compare_sequences(request: CompareRequest, limits: Optional[Settings] = None) -> CompareResponse:
    """Compare two sequences lexicographically"""
    limits = limits or settings
    _check_size("left", request.left, limits)
    _check_size("right", request.right, limits)

    left = SequenceIterator(request.left)
    right = SequenceIterator(request.right)

    if request.operator == ComparisonOperator.CMP:
        fn = compile_function(request.function) if request.function else natural_compare
        result = left.cmp_by(right, fn)
    else:
        result = getattr(left, request.operator.value)(right)

    logger.info(f"Compared {len(request.left)} vs {len(request.right)} items with {request.operator.value}: {result}")
    return CompareResponse(operator=request.operator, result=result)
