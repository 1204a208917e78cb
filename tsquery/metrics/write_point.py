"""
Write-point encoder -- splits a metrics instance into the client's write shape.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

from tsquery.core.errors import DoubleWriteError

if TYPE_CHECKING:
    from tsquery.metrics.model import Metrics


class WritePoint(BaseModel):
    """Payload passed to ``client.write_point``."""

    values: dict[str, Any] = Field(default_factory=dict, description="Value name -> value")
    tags: dict[str, Any] = Field(default_factory=dict, description="Tag name -> value")
    timestamp: int | None = Field(None, description="Point time, scaled to the client's precision")

    def to_params(self) -> dict[str, Any]:
        # timestamp is only sent when set
        if self.timestamp is None:
            return self.model_dump(exclude={"timestamp"})
        return self.model_dump()


def encode_write_point(instance: "Metrics") -> WritePoint:
    if instance.persisted:
        raise DoubleWriteError(f"{type(instance).__name__} instance is already persisted")
    return WritePoint(values=instance.values(), tags=instance.tags(), timestamp=instance.time)
