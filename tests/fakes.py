"""In-memory pipelines for tests."""

from dataclasses import dataclass, field
from typing import Any

from analyze_fastapi.app.services.token_stream import (
    AttributeReflector,
    Pipeline,
    TokenStream,
)


@dataclass
class FakeToken:
    term: str
    increment: int = 1
    attributes: list[tuple[str, Any]] = field(default_factory=list)


class FakeTokenStream(TokenStream):
    """Replays a fixed token list and records protocol calls."""

    def __init__(self, tokens: list[FakeToken], fail_at: int | None = None) -> None:
        self.tokens = tokens
        self.fail_at = fail_at
        self.calls: list[str] = []
        self._index = -1
        self._reset = False

    def reset(self) -> None:
        self.calls.append("reset")
        self._reset = True
        self._index = -1

    def increment_token(self) -> bool:
        if not self._reset:
            raise RuntimeError("reset() not called")
        self._index += 1
        if self.fail_at is not None and self._index == self.fail_at:
            raise RuntimeError("pipeline failure")
        return self._index < len(self.tokens)

    @property
    def term(self) -> str:
        return self.tokens[self._index].term

    @property
    def position_increment(self) -> int:
        return self.tokens[self._index].increment

    def reflect_with(self, reflector: AttributeReflector) -> None:
        token = self.tokens[self._index]
        reflector("term", token.term)
        for key, value in token.attributes:
            reflector(key, value)

    def end(self) -> None:
        self.calls.append("end")

    def close(self) -> None:
        self.calls.append("close")


class FakePipeline(Pipeline):
    """Splits text on whitespace unless given explicit tokens."""

    def __init__(
        self,
        name: str,
        tokens: list[FakeToken] | None = None,
        fail_at: int | None = None,
    ) -> None:
        self.name = name
        self.tokens = tokens
        self.fail_at = fail_at
        self.streams: list[FakeTokenStream] = []

    def token_stream(self, text: str) -> FakeTokenStream:
        tokens = self.tokens if self.tokens is not None else whitespace_tokens(text)
        stream = FakeTokenStream(tokens, fail_at=self.fail_at)
        self.streams.append(stream)
        return stream


def whitespace_tokens(text: str) -> list[FakeToken]:
    tokens = []
    offset = 0
    for word in text.split():
        start = text.index(word, offset)
        offset = start + len(word)
        tokens.append(
            FakeToken(
                word,
                attributes=[
                    ("bytes", word.encode("utf-8")),
                    ("startOffset", start),
                    ("endOffset", offset),
                    ("type", "word"),
                ],
            )
        )
    return tokens
