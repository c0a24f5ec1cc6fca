"""Token stream and pipeline contracts.

A pipeline turns text into a stateful, single-use token stream. Consumers
must drive a stream as ``reset()``, ``increment_token()`` until it returns
False, ``end()``, then ``close()``. While positioned on a token the stream
exposes its term, its position increment, and an open-ended set of named
attributes published through ``reflect_with``.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

AttributeReflector = Callable[[str, Any], None]


class TokenStream(ABC):
    """A single-use iteration over the tokens of one text."""

    @abstractmethod
    def reset(self) -> None:
        """Prepare the stream for iteration from the first token."""

    @abstractmethod
    def increment_token(self) -> bool:
        """Advance to the next token.

        Returns:
            True if the stream is positioned on a token, False once the
            stream is exhausted.
        """

    @property
    @abstractmethod
    def term(self) -> str:
        """Text of the current token."""

    @property
    @abstractmethod
    def position_increment(self) -> int:
        """Distance in positions from the previous token."""

    @abstractmethod
    def reflect_with(self, reflector: AttributeReflector) -> None:
        """Publish every attribute of the current token.

        Args:
            reflector: Called once per attribute with its key, in
                mixed-case identifier form, and its value.
        """

    def end(self) -> None:
        """Finalize the stream after the last token."""

    def close(self) -> None:
        """Release resources held by the stream."""


class Pipeline(ABC):
    """A configured tokenization process, also called an analyzer."""

    name: str

    @abstractmethod
    def token_stream(self, text: str) -> TokenStream:
        """Open a new token stream over ``text``."""
