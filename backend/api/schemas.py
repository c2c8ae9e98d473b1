"""Pydantic request schemas for API."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PositionBody(BaseModel):
    x: float
    y: float


class RootRequest(BaseModel):
    """A root folder spec: {id?, path, name?, children?, ...} as the provider sends it."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")
    path: str
    name: Optional[str] = None


class ChildrenRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    children: List[Dict[str, Any]] = Field(default_factory=list)


class ForestRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    nodes: List[Dict[str, Any]] = Field(default_factory=list)
    carry_over: bool = Field(default=True, alias="carryOver")


class AttributeRequest(BaseModel):
    name: str
    value: Any = None


class SearchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    query: str
    auto_expand: bool = Field(default=True, alias="autoExpand")


class DragBeginRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    node_id: str = Field(..., alias="nodeId")
    selected_ids: Optional[List[str]] = Field(default=None, alias="selectedIds")


class DragUpdateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    node_id: str = Field(..., alias="nodeId")
    position: PositionBody


class ViewportRequest(BaseModel):
    x: float
    y: float
    zoom: float = Field(..., gt=0)


class FitRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    node_ids: Optional[List[str]] = Field(default=None, alias="nodeIds")


class AreaRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    node_id: str = Field(..., alias="nodeId")
    color: Optional[str] = None


class LayoutSaveRequest(BaseModel):
    name: str = Field(..., min_length=1)
