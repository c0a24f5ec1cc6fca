"""spaCy-backed pipelines."""

import logging
from collections.abc import Callable
from typing import Any

import spacy
from spacy.language import Language
from spacy.tokens import Doc, Token

from analyze_fastapi.app.services.token_stream import (
    AttributeReflector,
    Pipeline,
    TokenStream,
)

logger = logging.getLogger(__name__)

BLANK_PREFIX = "blank:"


def load_language(model: str, disable: list[str] | None = None) -> Language:
    """Load a spaCy language object.

    Args:
        model: An installed model package name, or ``blank:<lang>`` for a
            tokenizer-only pipeline that needs no download.
        disable: Pipeline components to disable when loading a model.

    Returns:
        The loaded Language.
    """
    if model.startswith(BLANK_PREFIX):
        return spacy.blank(model[len(BLANK_PREFIX) :])
    return spacy.load(model, disable=disable or [])


def token_type(token: Token) -> str:
    """Classify a token the way Lucene's standard tokenizer names types."""
    if token.like_num:
        return "<NUM>"
    if token.is_punct:
        return "<PUNCT>"
    if token.is_alpha or token.text.isalnum():
        return "<ALPHANUM>"
    return "<SYMBOL>"


class SpacyTokenStream(TokenStream):
    """Token stream over a spaCy ``Doc``.

    The text is processed on ``reset()``. Whitespace tokens are skipped.
    """

    def __init__(self, nlp: Language, text: str) -> None:
        self._nlp = nlp
        self._text = text
        self._doc: Doc | None = None
        self._index = -1
        self._current: Token | None = None

    def reset(self) -> None:
        self._doc = self._nlp(self._text)
        self._index = -1
        self._current = None

    def increment_token(self) -> bool:
        if self._doc is None:
            raise RuntimeError("reset() must be called before increment_token()")
        while self._index + 1 < len(self._doc):
            self._index += 1
            token = self._doc[self._index]
            if not token.is_space:
                self._current = token
                return True
        self._current = None
        return False

    @property
    def term(self) -> str:
        return self._token.text

    @property
    def position_increment(self) -> int:
        return 1

    @property
    def _token(self) -> Token:
        if self._current is None:
            raise RuntimeError("stream is not positioned on a token")
        return self._current

    def reflect_with(self, reflector: AttributeReflector) -> None:
        token = self._token
        reflector("term", token.text)
        reflector("bytes", token.text.encode("utf-8"))
        reflector("startOffset", token.idx)
        reflector("endOffset", token.idx + len(token.text))
        reflector("positionIncrement", 1)
        reflector("positionLength", 1)
        reflector("type", token_type(token))
        for key, getter in _OPTIONAL_ATTRIBUTES:
            value = getter(token)
            if value:
                reflector(key, value)
        reflector("isStop", token.is_stop)
        reflector("shape", token.shape_)

    def end(self) -> None:
        self._current = None

    def close(self) -> None:
        self._doc = None
        self._current = None


# Only published when the loaded pipeline fills them in.
_OPTIONAL_ATTRIBUTES: list[tuple[str, Callable[[Token], Any]]] = [
    ("lemma", lambda token: token.lemma_),
    ("partOfSpeech", lambda token: token.pos_),
    ("tag", lambda token: token.tag_),
    ("entityType", lambda token: token.ent_type_),
]


class SpacyPipeline(Pipeline):
    """A named analyzer backed by a spaCy language object."""

    def __init__(self, name: str, nlp: Language) -> None:
        self.name = name
        self.nlp = nlp

    def token_stream(self, text: str) -> TokenStream:
        return SpacyTokenStream(self.nlp, text)

    def __repr__(self) -> str:
        return f"SpacyPipeline({self.name!r}, lang={self.nlp.lang!r})"
