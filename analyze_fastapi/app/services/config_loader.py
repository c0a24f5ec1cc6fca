"""Configuration loader for analyzer registries."""

import logging
import os
from pathlib import Path
from typing import Any, Callable

import yaml  # type: ignore[import-untyped]
from spacy.language import Language

from analyze_fastapi.app.config import settings
from analyze_fastapi.app.services.registry import (
    AnalyzerRegistry,
    CorpusRegistry,
    CorpusScope,
)
from analyze_fastapi.app.services.spacy_pipeline import SpacyPipeline, load_language

logger = logging.getLogger(__name__)

LanguageLoader = Callable[[str, list[str] | None], Language]


def load_registries(
    config_path: str | Path | None = None,
    loader: LanguageLoader = load_language,
) -> tuple[AnalyzerRegistry, CorpusRegistry]:
    """Load the global and corpus-scoped analyzer registries from YAML.

    The file has two top-level sections::

        analyzers:
          standard: {model: "blank:en"}
        corpora:
          products:
            analyzers:
              standard: {model: "blank:xx"}

    Each analyzer names a spaCy ``model`` and may list components to
    ``disable``. Models shared by several analyzers are loaded once.

    Args:
        config_path: Path to the YAML configuration file.
            If None, ``settings.analyzers_config_file`` is used.
        loader: Loads a spaCy language object for a model name.

    Returns:
        The global registry and the corpus registry.

    Raises:
        FileNotFoundError: If the configuration file cannot be found.
        ValueError: If the configuration is invalid.
    """
    if config_path is None:
        config_path = settings.analyzers_config_file

    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Analyzer configuration not found at {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}

        languages: dict[tuple[str, tuple[str, ...]], Language] = {}

        def build(section: dict[str, Any]) -> dict[str, SpacyPipeline]:
            pipelines = {}
            for name, analyzer_config in (section or {}).items():
                model = analyzer_config["model"]
                disable = list(analyzer_config.get("disable", []))
                cache_key = (model, tuple(disable))
                if cache_key not in languages:
                    logger.info("Loading spaCy model %s", model)
                    languages[cache_key] = loader(model, disable)
                pipelines[name] = SpacyPipeline(name, languages[cache_key])
            return pipelines

        registry = AnalyzerRegistry()
        for name, pipeline in build(config.get("analyzers", {})).items():
            registry.register(name, pipeline)
        logger.info("Loaded global analyzers: %s", ", ".join(registry.names()))

        corpora = CorpusRegistry()
        for corpus_name, corpus_config in (config.get("corpora") or {}).items():
            scope = CorpusScope(
                corpus_name,
                build((corpus_config or {}).get("analyzers", {})),
                parent=registry,
            )
            corpora.register(scope)
            logger.info(
                "Loaded corpus %s with analyzers: %s",
                corpus_name,
                ", ".join(scope.names()),
            )

        return registry, corpora

    except Exception as e:
        logger.error("Error loading analyzer configuration: %s", str(e))
        raise ValueError(f"Invalid analyzer configuration: {str(e)}") from e
