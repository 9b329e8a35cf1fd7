import datetime
import logging
from typing import Any, Dict

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from models import (
    CompareRequest, CompareResponse, ErrorResponse, HealthCheckResponse,
    PipelineRequest, PipelineResponse
)
from utils import PipelineError, compare_sequences, run_pipeline, settings

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Expressive Iterators",
    description="Lazy map/filter/take pipelines and lexicographic sequence comparison"
)


def _error(status_code: int, error_code: str, message: str, details: Dict[str, Any] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            error=message,
            error_code=error_code,
            timestamp=datetime.datetime.now(datetime.timezone.utc).isoformat(),
            details=details
        ).model_dump()
    )


@app.post("/pipeline", response_model=PipelineResponse)
def pipeline(request: PipelineRequest) -> PipelineResponse:
    """
    Run an adaptor chain over the posted data:
      - wraps data in a source iterator
      - applies map/filter/take lazily, in order
      - consumes the chain with the requested terminal operation
    """
    try:
        return run_pipeline(request)
    except PipelineError as e:
        logger.warning(f"Rejected pipeline: {e.message}")
        return _error(400, e.error_code, e.message)
    except Exception as e:
        logger.error(f"Pipeline evaluation failed: {e}")
        return _error(422, "EVALUATION_ERROR", f"Failed to evaluate pipeline: {e}",
                      {"exception": type(e).__name__})


@app.post("/compare", response_model=CompareResponse)
def compare(request: CompareRequest) -> CompareResponse:
    """Compare two sequences lexicographically"""
    try:
        return compare_sequences(request)
    except PipelineError as e:
        logger.warning(f"Rejected comparison: {e.message}")
        return _error(400, e.error_code, e.message)
    except Exception as e:
        logger.error(f"Comparison failed: {e}")
        return _error(422, "EVALUATION_ERROR", f"Failed to compare sequences: {e}",
                      {"exception": type(e).__name__})


@app.get("/health", response_model=HealthCheckResponse)
async def health_check() -> HealthCheckResponse:
    """Health check endpoint"""
    return HealthCheckResponse(
        status="healthy",
        timestamp=datetime.datetime.now(datetime.timezone.utc).isoformat(),
        max_items=settings.max_items
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
