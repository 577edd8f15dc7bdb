"""
Pydantic models for Composer.

All request/response shapes defined here. No imports from routes.
"""

from backend.models.preview import (
    ComponentEnvelope,
    DocumentEnvelope,
    PageEnvelope,
    RenderComponentRequest,
    RenderComponentResponse,
    RenderPageRequest,
    RenderPageResponse,
    SourceRequest,
    StylesRequest,
    StylesResponse,
)

__all__ = [
    # Storage envelopes
    "ComponentEnvelope",
    "PageEnvelope",
    "DocumentEnvelope",
    # Component preview
    "RenderComponentRequest",
    "RenderComponentResponse",
    # Page preview
    "RenderPageRequest",
    "RenderPageResponse",
    # Properties, styles, import
    "SourceRequest",
    "StylesRequest",
    "StylesResponse",
]
