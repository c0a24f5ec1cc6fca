"""Token stream consumer."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from analyze_fastapi.app.models import OutputOptions, TokenRecord
from analyze_fastapi.app.services.attribute_projector import project
from analyze_fastapi.app.services.token_stream import Pipeline, TokenStream

logger = logging.getLogger(__name__)

# Fields computed by the consumer itself, never taken from reflection.
RESERVED_KEYS = frozenset({"term", "position"})


@contextmanager
def open_stream(pipeline: Pipeline, text: str) -> Iterator[TokenStream]:
    """Open a token stream that is ended and closed on every exit path."""
    stream = pipeline.token_stream(text)
    try:
        yield stream
    finally:
        try:
            stream.end()
        finally:
            stream.close()


def consume(pipeline: Pipeline, text: str, options: OutputOptions) -> list[TokenRecord]:
    """Run ``text`` through ``pipeline`` and collect its tokens.

    Args:
        pipeline: The resolved analyzer.
        text: The text to tokenize.
        options: Caller-selected output fields.

    Returns:
        Token records in the order the pipeline produced them.
    """
    records: list[TokenRecord] = []
    with open_stream(pipeline, text) as stream:
        stream.reset()
        position = 0
        while stream.increment_token():
            increment = stream.position_increment
            if increment > 0:
                position += increment

            extras: list[tuple[str, Any]] = []

            def reflect(key: str, value: Any) -> None:
                projected = project(key, value, options)
                if projected is not None and projected[0] not in RESERVED_KEYS:
                    extras.append(projected)

            stream.reflect_with(reflect)
            records.append(
                TokenRecord(
                    term=stream.term,
                    position=position if options.position else None,
                    extra_attributes=extras,
                )
            )
    logger.debug("Consumed %d tokens from %s", len(records), getattr(pipeline, "name", pipeline))
    return records
