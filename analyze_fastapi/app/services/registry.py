"""Analyzer registries: global and corpus-scoped."""

import logging
from collections.abc import Mapping

from analyze_fastapi.app.services.token_stream import Pipeline

logger = logging.getLogger(__name__)


class AnalyzerRegistry:
    """Global lookup of pipelines by analyzer name."""

    def __init__(self, analyzers: Mapping[str, Pipeline] | None = None) -> None:
        self._analyzers: dict[str, Pipeline] = dict(analyzers or {})

    def register(self, name: str, pipeline: Pipeline) -> None:
        if name in self._analyzers:
            logger.warning("Analyzer %s registered twice, replacing", name)
        self._analyzers[name] = pipeline

    def analyzer(self, name: str) -> Pipeline | None:
        return self._analyzers.get(name)

    def names(self) -> list[str]:
        return list(self._analyzers)


class CorpusScope:
    """Analyzers configured for one corpus.

    A corpus's own analyzers override global analyzers of the same name;
    any other name falls through to the global registry.
    """

    def __init__(
        self,
        name: str,
        analyzers: Mapping[str, Pipeline] | None = None,
        parent: AnalyzerRegistry | None = None,
    ) -> None:
        self.name = name
        self._analyzers: dict[str, Pipeline] = dict(analyzers or {})
        self._parent = parent

    def analyzer(self, name: str) -> Pipeline | None:
        pipeline = self._analyzers.get(name)
        if pipeline is None and self._parent is not None:
            pipeline = self._parent.analyzer(name)
        return pipeline

    def names(self) -> list[str]:
        names = list(self._analyzers)
        if self._parent is not None:
            names.extend(n for n in self._parent.names() if n not in self._analyzers)
        return names


class CorpusRegistry:
    """Lookup of corpus scopes by name."""

    def __init__(self, scopes: list[CorpusScope] | None = None) -> None:
        self._scopes: dict[str, CorpusScope] = {}
        for scope in scopes or []:
            self.register(scope)

    def register(self, scope: CorpusScope) -> None:
        if scope.name in self._scopes:
            logger.warning("Corpus %s registered twice, replacing", scope.name)
        self._scopes[scope.name] = scope

    def lookup_scope(self, name: str) -> CorpusScope | None:
        return self._scopes.get(name)

    def names(self) -> list[str]:
        return list(self._scopes)
