"""
Request bodies for the HTTP surface.

Malformed bodies are rejected by FastAPI with 422 before any handler runs.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class PageDirection(str, Enum):
    LEFT = "left"
    RIGHT = "right"


class ScrollRequest(BaseModel):
    """Raw user scroll on one pane."""
    pane: str
    offset: float = Field(allow_inf_nan=False)


class ViewportRequest(BaseModel):
    width: float = Field(ge=0, allow_inf_nan=False)


class ExpandRequest(BaseModel):
    """Ids to expand; omitted means every expandable node."""
    ids: Optional[List[str]] = None


class FilterRequest(BaseModel):
    """Replaces the row filter wholesale."""
    query: str = ""
    selected_ids: Optional[List[str]] = None
    hidden_tiers: List[str] = Field(default_factory=list)
