"""Schemas for rendered views and result summaries."""

from typing import Optional

from pydantic import BaseModel, Field


class RenderedView(BaseModel):
    """The currently displayed value of a result, rendered."""

    result_id: str
    value_type: str = Field(..., description="Type name of the displayed value")
    tabs: list[str] = Field(
        default_factory=list,
        description="Labels of applicable visualizers, best first",
    )
    selected: Optional[str] = Field(
        default=None,
        description="Label of the visualizer that rendered the value, None if none applies",
    )
    html: str = ""
    error: Optional[str] = Field(
        default=None,
        description="Render failure message, shown in place of the value",
    )
    breadcrumbs: list[str] = Field(default_factory=list)


class ResultSummary(BaseModel):
    """An evaluated result and its navigation state."""

    result_id: str
    code: str
    failed: bool = False
    evaluated_at: str
    value_type: str = Field(..., description="Type name of the displayed value")
    depth: int = Field(..., description="Navigation depth, 1 at the root value")
    breadcrumbs: list[str] = Field(default_factory=list)
    trail: str = Field(default="", description="Breadcrumbs as 'a;b;c;'")
    applicable: list[str] = Field(
        default_factory=list,
        description="Labels of visualizers supporting the displayed value, best first",
    )
