"""Preview models for component, page, property and style requests."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ComponentEnvelope(BaseModel):
    """A stored component: the camelCase storage shape, JSON-text fields included."""

    id: str = Field(min_length=1, max_length=200)
    type: str = "Component"
    rawCode: str | None = None
    properties: str | dict[str, Any] | None = None
    styles: str | dict[str, Any] | None = None
    orderIndex: int = 0
    isCustom: bool = False
    jsxContent: str | None = None


class PageEnvelope(BaseModel):
    id: str = Field(min_length=1, max_length=200)
    name: str | None = ""
    path: str = "/"
    isHomePage: bool = False
    components: list[ComponentEnvelope] = Field(default_factory=list)


class DocumentEnvelope(BaseModel):
    """A template or project: an ordered list of pages."""

    id: str = Field(min_length=1, max_length=200)
    name: str | None = ""
    pages: list[PageEnvelope] = Field(default_factory=list)


class RenderComponentRequest(BaseModel):
    """What the client sends to POST /api/preview/component."""

    model_config = {"extra": "forbid"}

    component: ComponentEnvelope
    overrides: dict[str, Any] | None = None


class ElementResponse(BaseModel):
    elementId: str
    elementType: str
    path: list[int]
    componentId: str
    content: str | None = None
    styles: dict[str, Any] = Field(default_factory=dict)


class ComponentErrorResponse(BaseModel):
    stage: str
    message: str
    detail: str | None = None


class RenderComponentResponse(BaseModel):
    """What the component preview endpoint returns."""

    component_id: str
    state: str
    html: str
    error: ComponentErrorResponse | None = None
    elements: list[ElementResponse] = Field(default_factory=list)


class RenderPageRequest(BaseModel):
    """What the client sends to POST /api/preview/page."""

    model_config = {"extra": "forbid"}

    document: DocumentEnvelope
    path: str | None = None
    editor_mode: bool = False
    selected_component_id: str | None = None


class RenderPageResponse(BaseModel):
    page_id: str
    path: str
    html: str
    errors: list[ComponentErrorResponse] = Field(default_factory=list)


class SourceRequest(BaseModel):
    """Component source text, for property extraction and import."""

    model_config = {"extra": "forbid"}

    source: str = Field(max_length=500_000)


class PropertyResponse(BaseModel):
    type: str
    value: Any
    label: str
    editable: bool = True


class PropertiesResponse(BaseModel):
    properties: dict[str, PropertyResponse]
    authored: str


class StylesRequest(BaseModel):
    """What the client sends to POST /api/preview/styles."""

    model_config = {"extra": "forbid"}

    styles: dict[str, Any] = Field(default_factory=dict)


class StylesResponse(BaseModel):
    class_tokens: str
    residual_styles: dict[str, str]
