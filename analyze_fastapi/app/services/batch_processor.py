"""Batch analyze request processing."""

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

from pydantic import ValidationError

from analyze_fastapi.app.exceptions import (
    RequestError,
    RequestErrorKind,
    ResolutionError,
)
from analyze_fastapi.app.models import AnalyzeSpec, OutputOptions, ResolvedAnalyzeSpec
from analyze_fastapi.app.prometheus import track_subrequest
from analyze_fastapi.app.services.consumer import consume
from analyze_fastapi.app.services.token_stream import Pipeline
from analyze_fastapi.app.telemetry import trace_span

logger = logging.getLogger(__name__)

AnalyzeBatchResponse = dict[str, list[dict[str, Any]]]


class Resolver(Protocol):
    def resolve(self, corpus: str | None, analyzer: str) -> Pipeline: ...


def parse_batch(raw_body: bytes | str | None) -> dict[str, AnalyzeSpec]:
    """Parse a request body into named sub-requests, keeping their order.

    Args:
        raw_body: The raw JSON body.

    Returns:
        Sub-requests keyed by name, in body order.

    Raises:
        RequestError: If the body is empty or not a JSON object of objects.
    """
    if raw_body is None or not raw_body.strip():
        raise RequestError(RequestErrorKind.EMPTY_BODY)

    try:
        source = json.loads(raw_body)
    except ValueError as e:
        raise RequestError(RequestErrorKind.MALFORMED_BODY, detail=str(e)) from e

    if not isinstance(source, dict):
        raise RequestError(
            RequestErrorKind.MALFORMED_BODY, detail="expected a JSON object"
        )

    batch: dict[str, AnalyzeSpec] = {}
    for name, value in source.items():
        if not isinstance(value, dict):
            raise RequestError(
                RequestErrorKind.MALFORMED_BODY,
                request_name=name,
                detail="expected a JSON object",
            )
        try:
            batch[name] = AnalyzeSpec.model_validate(value)
        except ValidationError as e:
            fields = ", ".join(".".join(map(str, err["loc"])) for err in e.errors())
            raise RequestError(
                RequestErrorKind.MALFORMED_BODY,
                request_name=name,
                detail=f"invalid fields: {fields}",
            ) from e
    return batch


def resolve_defaults(
    batch: Mapping[str, AnalyzeSpec],
    default_corpus: str | None,
    default_analyzer: str | None,
) -> list[ResolvedAnalyzeSpec]:
    """Apply caller defaults to every sub-request before any analysis runs."""
    return [
        spec.resolve(name, default_corpus, default_analyzer)
        for name, spec in batch.items()
    ]


def process(
    raw_body: bytes | str | None,
    default_corpus: str | None,
    default_analyzer: str | None,
    options: OutputOptions,
    resolver: Resolver,
) -> AnalyzeBatchResponse:
    """Tokenize every sub-request of a batch.

    Sub-requests run one at a time in body order. Any failure aborts the
    whole batch; nothing is returned for sub-requests that already ran.

    Args:
        raw_body: The raw JSON request body.
        default_corpus: Corpus for sub-requests that name none.
        default_analyzer: Analyzer for sub-requests that name none.
        options: Caller-selected output fields.
        resolver: Maps a corpus and analyzer name to a pipeline.

    Returns:
        Token objects keyed by sub-request name, in body order.

    Raises:
        RequestError: If the body is invalid or a corpus or analyzer is unknown.
    """
    specs = resolve_defaults(parse_batch(raw_body), default_corpus, default_analyzer)

    response: AnalyzeBatchResponse = {}
    for spec in specs:
        with trace_span(
            "analyze.subrequest",
            **{
                "app.analyze.request": spec.name,
                "app.analyze.corpus": spec.corpus,
                "app.analyze.analyzer": spec.analyzer,
            },
        ):
            try:
                pipeline = resolver.resolve(spec.corpus, spec.analyzer)
            except ResolutionError as e:
                e.request_name = spec.name
                raise

            records = consume(pipeline, spec.text, options)

        track_subrequest(spec.analyzer, spec.corpus, len(records))
        response[spec.name] = [record.to_dict() for record in records]

    logger.info("Analyzed %d requests", len(response))
    return response
