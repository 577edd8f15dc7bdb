"""Preview routes: render components and pages, extract properties, map styles, import."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, status

from backend.config import settings
from backend.models.preview import (
    ComponentErrorResponse,
    ElementResponse,
    PropertiesResponse,
    PropertyResponse,
    RenderComponentRequest,
    RenderComponentResponse,
    RenderPageRequest,
    RenderPageResponse,
    SourceRequest,
    StylesRequest,
    StylesResponse,
)
from composer.kernel import (
    ComponentFailure,
    ComponentInstantiator,
    PageNotFound,
    assign_element_handles,
    extract_property_schema,
    format_property_block,
    import_component,
    render_page,
    resolve_style_tokens,
    to_html,
)
from composer.kernel.pages import normalize_path
from composer.kernel.types import ComponentDefinition, Document

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/preview", tags=["preview"])

# Shared across requests so repeated previews of unchanged components hit the cache.
# Stateless HTTP has nowhere to navigate to; link activation stays inert.
instantiator = ComponentInstantiator(options=settings.render_options())


def _error(failure: ComponentFailure | None) -> ComponentErrorResponse | None:
    if failure is None:
        return None
    return ComponentErrorResponse(stage=failure.stage, message=failure.message, detail=failure.detail)


@router.post("/component", status_code=200)
async def preview_component(req: RenderComponentRequest) -> RenderComponentResponse:
    """
    Render one component.

    Failures never produce an error status: the response carries the
    fallback or placeholder markup plus the failure that caused it. Element
    handles are returned only for successful renders.
    """
    definition = ComponentDefinition.from_dict(req.component.model_dump())
    result = instantiator.render(definition, req.overrides)
    elements = []
    if result.ok:
        elements = [ElementResponse(**h.to_dict()) for h in assign_element_handles(definition.id, result.nodes)]
    return RenderComponentResponse(
        component_id=definition.id,
        state=result.state,
        html=to_html(result.nodes),
        error=_error(result.error),
        elements=elements,
    )


@router.post("/page", status_code=200)
async def preview_page(req: RenderPageRequest) -> RenderPageResponse:
    """Render the page a path resolves to. 404 when the document has no pages."""
    document = Document.from_dict(req.document.model_dump())
    page_instantiator = instantiator
    if req.editor_mode:
        page_instantiator = ComponentInstantiator(
            options=settings.render_options(editor_mode=True, selected_component_id=req.selected_component_id)
        )
    try:
        rendered = render_page(document, req.path, page_instantiator)
    except PageNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message) from None
    errors = [_error(f) for f in rendered.errors]
    if errors:
        logger.info("preview: page %s rendered with %d component errors", rendered.page.id, len(errors))
    return RenderPageResponse(
        page_id=rendered.page.id,
        path=normalize_path(rendered.page.path),
        html=to_html(rendered.nodes),
        errors=errors,
    )


@router.post("/properties", status_code=200)
async def preview_properties(req: SourceRequest) -> PropertiesResponse:
    """Extract the editable property schema from component source."""
    schema = extract_property_schema(req.source)
    return PropertiesResponse(
        properties={key: PropertyResponse(**record.to_dict()) for key, record in schema.items()},
        authored=format_property_block(schema),
    )


@router.post("/styles", status_code=200)
async def preview_styles(req: StylesRequest) -> StylesResponse:
    """Map a style description to utility-class tokens and residual inline styles."""
    resolution = resolve_style_tokens(req.styles)
    return StylesResponse(class_tokens=resolution.class_tokens, residual_styles=resolution.residual_styles)


@router.post("/import", status_code=201)
async def import_source(req: SourceRequest) -> dict[str, Any]:
    """Import uploaded component source; returns the storage envelope."""
    if not req.source.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Source is empty.")
    return import_component(req.source).to_dict()
