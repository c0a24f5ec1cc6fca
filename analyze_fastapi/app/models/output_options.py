"""Caller-selected output fields for token records."""

from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field

_TRUE_VALUES = frozenset({"", "true", "1", "yes", "on"})

# Query parameters that configure the request rather than select fields.
CONTROL_PARAMS = frozenset({"corpus", "index", "analyzer", "pretty"})


def is_enabled(value: str | None) -> bool:
    """Interpret a query parameter value as a boolean flag."""
    if value is None:
        return False
    return value.strip().lower() in _TRUE_VALUES


class OutputOptions(BaseModel):
    """Which optional fields to emit for every token.

    Attributes:
        position: Whether to emit the accumulated token position.
        attributes: Normalized attribute keys that are enabled.
    """

    model_config = ConfigDict(frozen=True)

    position: bool = Field(default=False, description="Emit token positions")
    attributes: frozenset[str] = Field(
        default_factory=frozenset, description="Enabled attribute keys"
    )

    def enables(self, key: str) -> bool:
        return key in self.attributes

    @classmethod
    def from_params(cls, params: Mapping[str, str]) -> "OutputOptions":
        """Build options from query parameters.

        Every parameter other than the request controls is treated as a
        field flag; flags no pipeline publishes simply never match.
        """
        enabled = frozenset(
            key
            for key, value in params.items()
            if key not in CONTROL_PARAMS and is_enabled(value)
        )
        return cls(position="position" in enabled, attributes=enabled - {"position"})
