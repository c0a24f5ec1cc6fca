"""Model representing one emitted token."""

from typing import Any

from pydantic import BaseModel, Field


class TokenRecord(BaseModel):
    term: str = Field(..., description="The token text")
    position: int | None = Field(
        default=None, ge=0, description="Accumulated token position"
    )
    extra_attributes: list[tuple[str, Any]] = Field(
        default_factory=list, description="Projected attributes in pipeline order"
    )

    def to_dict(self) -> dict[str, Any]:
        """Render the record as a response token object."""
        data: dict[str, Any] = {"term": self.term}
        if self.position is not None:
            data["position"] = self.position
        for key, value in self.extra_attributes:
            data[key] = value
        return data
