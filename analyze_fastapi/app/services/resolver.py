"""Analyzer resolution for sub-requests."""

import logging

from analyze_fastapi.app.exceptions import RequestErrorKind, ResolutionError
from analyze_fastapi.app.services.registry import AnalyzerRegistry, CorpusRegistry
from analyze_fastapi.app.services.token_stream import Pipeline

logger = logging.getLogger(__name__)


class GlobalResolver:
    """Resolves analyzer names against the global registry."""

    def __init__(self, registry: AnalyzerRegistry) -> None:
        self._registry = registry

    def resolve(self, corpus: str | None, analyzer: str) -> Pipeline:
        pipeline = self._registry.analyzer(analyzer)
        if pipeline is None:
            raise ResolutionError(RequestErrorKind.UNKNOWN_ANALYZER, analyzer)
        return pipeline


class ScopedResolver:
    """Resolves analyzer names within a named corpus."""

    def __init__(self, corpora: CorpusRegistry) -> None:
        self._corpora = corpora

    def resolve(self, corpus: str | None, analyzer: str) -> Pipeline:
        scope = self._corpora.lookup_scope(corpus) if corpus is not None else None
        if scope is None:
            raise ResolutionError(RequestErrorKind.UNKNOWN_CORPUS, str(corpus))
        pipeline = scope.analyzer(analyzer)
        if pipeline is None:
            raise ResolutionError(
                RequestErrorKind.UNKNOWN_ANALYZER, f"{analyzer} (corpus {corpus})"
            )
        return pipeline


class AnalyzerResolver:
    """Picks the scoped or global lookup depending on whether a corpus is named.

    Every call performs a fresh lookup; nothing is cached here.
    """

    def __init__(self, registry: AnalyzerRegistry, corpora: CorpusRegistry) -> None:
        self._global = GlobalResolver(registry)
        self._scoped = ScopedResolver(corpora)

    def resolve(self, corpus: str | None, analyzer: str) -> Pipeline:
        """Return the pipeline for ``analyzer``, scoped to ``corpus`` if given.

        Raises:
            ResolutionError: If the corpus or the analyzer is unknown.
        """
        backend = self._scoped if corpus is not None else self._global
        pipeline = backend.resolve(corpus, analyzer)
        logger.debug("Resolved analyzer %s (corpus=%s)", analyzer, corpus)
        return pipeline
