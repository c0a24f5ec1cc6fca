"""Errors raised while processing analyze requests."""

from enum import Enum


class RequestErrorKind(str, Enum):
    """Why a batch was rejected."""

    EMPTY_BODY = "empty_body"
    MALFORMED_BODY = "malformed_body"
    MISSING_ANALYZER = "missing_analyzer"
    MISSING_TEXT = "missing_text"
    UNKNOWN_CORPUS = "unknown_corpus"
    UNKNOWN_ANALYZER = "unknown_analyzer"


class AnalyzeApiError(Exception):
    """Base class for analyze API errors."""


class RequestError(AnalyzeApiError):
    """The batch input is malformed or incomplete.

    Attributes:
        kind: The failure category.
        request_name: Name of the offending sub-request, if any.
        detail: Extra context appended to the message.
    """

    def __init__(
        self,
        kind: RequestErrorKind,
        request_name: str | None = None,
        detail: str | None = None,
    ) -> None:
        self.kind = kind
        self.request_name = request_name
        self.detail = detail
        super().__init__(self.message)

    @property
    def message(self) -> str:
        text = _MESSAGES[self.kind]
        if self.request_name is not None:
            text = f"{text} in request '{self.request_name}'"
        if self.detail:
            text = f"{text}: {self.detail}"
        return text

    def __str__(self) -> str:
        return self.message


class ResolutionError(RequestError):
    """The named corpus or analyzer does not exist."""

    def __init__(
        self,
        kind: RequestErrorKind,
        target: str,
        request_name: str | None = None,
    ) -> None:
        self.target = target
        super().__init__(kind, request_name=request_name, detail=target)


_MESSAGES = {
    RequestErrorKind.EMPTY_BODY: "No contents",
    RequestErrorKind.MALFORMED_BODY: "Malformed request body",
    RequestErrorKind.MISSING_ANALYZER: "analyzer is not found",
    RequestErrorKind.MISSING_TEXT: "text is not found",
    RequestErrorKind.UNKNOWN_CORPUS: "Unknown corpus",
    RequestErrorKind.UNKNOWN_ANALYZER: "Unknown analyzer",
}
