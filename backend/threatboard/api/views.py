"""
Fixed views over a collection: active indicators by severity and open
critical incidents.
"""
from functools import partial
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ..models.common import ListResponse
from ..services.catalog import is_active_with_severity, is_open_critical
from ..services.resources import ResourceRegistry
from .resources import ERROR_RESPONSES, PARAMETER_DESCRIPTIONS
from .routes import get_registry

router = APIRouter(responses=ERROR_RESPONSES)


@router.get(
    "/indicators/severity/{level}",
    response_model=ListResponse,
    tags=["Indicators"],
    summary="List active indicators of one severity",
)
def list_indicators_by_severity(
    level: str,
    limit: Optional[str] = Query(None, description=PARAMETER_DESCRIPTIONS["limit"]),
    offset: Optional[str] = Query(None, description=PARAMETER_DESCRIPTIONS["offset"]),
    registry: ResourceRegistry = Depends(get_registry),
):
    data, meta = registry["indicators"].select(
        partial(is_active_with_severity, level=level),
        {"limit": limit, "offset": offset},
    )
    return {"data": data, "meta": meta.to_dict()}


@router.get(
    "/incidents/critical/active",
    response_model=ListResponse,
    tags=["Incidents"],
    summary="List critical incidents that are not closed",
)
def list_open_critical_incidents(
    limit: Optional[str] = Query(None, description=PARAMETER_DESCRIPTIONS["limit"]),
    offset: Optional[str] = Query(None, description=PARAMETER_DESCRIPTIONS["offset"]),
    registry: ResourceRegistry = Depends(get_registry),
):
    data, meta = registry["incidents"].select(is_open_critical, {"limit": limit, "offset": offset})
    return {"data": data, "meta": meta.to_dict()}
