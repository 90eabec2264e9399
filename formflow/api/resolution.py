"""Template rendering and field mapping API routes.

Exposes the field resolution engine for a form: rendering templates,
building the mapped view of a payload, and resolving single fields or
variables.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from formflow.api.deps import get_engine
from formflow.api.schemas import (
    AliasResponse,
    MappingRequest,
    MappingResponse,
    RenderRequest,
    RenderResponse,
    VariableResolveRequest,
    VariableResolveResponse,
)
from formflow.strategies.field_resolution import FieldResolutionEngine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/forms", tags=["resolution"])


@router.post("/{form_id}/render", response_model=RenderResponse)
async def render_templates(
    form_id: str,
    request: RenderRequest,
    engine: FieldResolutionEngine = Depends(get_engine),
) -> RenderResponse:
    """Render templates against a submission payload.

    Unresolvable variables render as empty strings; the engine never
    fails a render, so this endpoint only errors on invalid input.
    """
    logger.info(f"Rendering {len(request.templates)} template(s) for form {form_id}")

    rendered = await engine.render_many(request.templates, form_id, request.payload)
    variables = list(
        dict.fromkeys(name for template in request.templates for name in engine.extract_variables(template))
    )

    return RenderResponse(form_id=form_id, rendered=rendered, variables=variables)


@router.post("/{form_id}/mappings", response_model=MappingResponse)
async def resolve_mappings(
    form_id: str,
    request: MappingRequest,
    engine: FieldResolutionEngine = Depends(get_engine),
) -> MappingResponse:
    """Return the payload plus every alias derivable from the form definition."""
    mapped = await engine.resolve_all_mappings(form_id, request.payload)
    return MappingResponse(form_id=form_id, mapped=mapped)


@router.get("/{form_id}/fields/{field_id}/alias", response_model=AliasResponse)
async def resolve_field_alias(
    form_id: str,
    field_id: str,
    engine: FieldResolutionEngine = Depends(get_engine),
) -> AliasResponse:
    """Return the preferred alias of one field (the field id if none exists)."""
    alias = await engine.resolve_one(form_id, field_id)
    return AliasResponse(form_id=form_id, field_id=field_id, alias=alias)


@router.post("/{form_id}/variables/{variable_name}", response_model=VariableResolveResponse)
async def resolve_variable(
    form_id: str,
    variable_name: str,
    request: VariableResolveRequest,
    engine: FieldResolutionEngine = Depends(get_engine),
) -> VariableResolveResponse:
    """Resolve one variable and report which strategy produced it."""
    if not variable_name.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Variable name must not be blank",
        )

    result = await engine.resolve_variable(form_id, variable_name, request.payload)
    return VariableResolveResponse(
        form_id=form_id,
        variable=variable_name,
        found=result.found,
        value=result.value,
        strategy=result.strategy,
    )
