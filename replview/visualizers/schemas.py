"""Visualizer API schemas."""

from typing import Optional

from pydantic import BaseModel, Field


class VisualizerSummary(BaseModel):
    """A registered visualizer as listed by the API."""

    index: int = Field(..., description="Registry position, the tie-break for equal precedence")
    label: str
    precedence: Optional[int] = Field(
        default=None,
        description="Declared precedence, None if the visualizer failed to report one",
    )
    side_channel: bool = Field(
        default=False,
        description="Whether the visualizer exposes HTTP routes",
    )
