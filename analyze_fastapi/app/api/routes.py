"""Routes module for the analyze API."""

import json
import logging
from typing import Any, Dict

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import JSONResponse, Response
from starlette.concurrency import run_in_threadpool

from analyze_fastapi.app.config import settings
from analyze_fastapi.app.exceptions import RequestError, ResolutionError
from analyze_fastapi.app.models import OutputOptions
from analyze_fastapi.app.services.batch_processor import process
from analyze_fastapi.app.services.resolver import AnalyzerResolver
from analyze_fastapi.app.telemetry import trace_method

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get(
    "/",
    summary="Root endpoint",
    response_description="API status",
    status_code=status.HTTP_200_OK,
    tags=["Monitoring"],
)
@trace_method("root")
async def root() -> Dict[str, str]:
    """Root API endpoint.

    Returns:
        A simple status message confirming the API is running.
    """
    return {"status": "ok"}


@router.get(
    "/health",
    summary="Health check endpoint",
    response_description="Service health status",
    status_code=status.HTTP_200_OK,
    tags=["Monitoring"],
)
@trace_method("health_check")
async def health_check() -> Dict[str, str]:
    """Health check endpoint.

    Returns:
        A simple status message confirming the service is healthy.
    """
    return {"status": "healthy"}


@router.api_route(
    "/_analyze_api",
    methods=["GET", "POST"],
    summary="Tokenize a batch of named texts",
    response_description="Token lists keyed by request name",
    tags=["Analyzer"],
)
@router.api_route(
    "/{corpus}/_analyze_api",
    methods=["GET", "POST"],
    summary="Tokenize a batch of named texts within a corpus",
    response_description="Token lists keyed by request name",
    tags=["Analyzer"],
)
@trace_method("analyze_api")
async def analyze_api(req: Request, corpus: str | None = None) -> Response:
    """Run every named text of the body through its analyzer.

    The body maps request names to ``{"corpus", "analyzer", "text"}``
    objects. The ``corpus`` path segment (or query parameter) and the
    ``analyzer`` query parameter are defaults for sub-requests that omit
    them. Every other boolean query parameter enables an output field:
    ``position`` for the accumulated position, or any token attribute by
    its underscore name, e.g. ``type`` or ``start_offset``. The presence of
    ``pretty``, whatever its value, indents the response.

    Args:
        req: FastAPI request object, used for the body, the query
            parameters and the analyzer resolver in application state.
        corpus: Default corpus taken from the path.

    Returns:
        A JSON object keyed by request name, in body order, whose values
        are arrays of token objects.

    Raises:
        HTTPException:
            - 400 (Bad Request): If the body is empty, malformed or incomplete.
            - 404 (Not Found): If a corpus or analyzer does not exist.
            - 413 (Request Entity Too Large): If the body is too large.
            - 503 (Service Unavailable): If no analyzers are loaded.
            - 500 (Internal Server Error): For unexpected analysis errors.
    """
    resolver = _get_resolver_from_request(req)
    params = req.query_params
    default_corpus = corpus or params.get("corpus") or params.get("index")
    default_analyzer = params.get("analyzer") or settings.default_analyzer
    options = OutputOptions.from_params(params)

    body = await req.body()
    if len(body) > settings.MAX_TEXT_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Request body exceeds {settings.MAX_TEXT_LENGTH} bytes",
        )

    try:
        result = await run_in_threadpool(
            process, body, default_corpus, default_analyzer, options, resolver
        )
    except ResolutionError as e:
        logger.warning("Analyzer resolution failed: %s", e)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except RequestError as e:
        logger.warning("Invalid request: %s", e)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except Exception as e:
        logger.exception("Unexpected error during analysis")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error occurred",
        ) from e

    return _render(result, pretty="pretty" in params)


def _get_resolver_from_request(req: Request) -> AnalyzerResolver:
    resolver = getattr(req.app.state, "resolver", None)
    if not resolver:
        logger.error("Analyzer registry not available")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Analyzer service not available",
        )
    return resolver


def _render(content: Dict[str, Any], pretty: bool) -> Response:
    if not pretty:
        return JSONResponse(content=content)
    body = json.dumps(content, ensure_ascii=False, allow_nan=False, indent=2) + "\n"
    return Response(content=body, media_type="application/json")
