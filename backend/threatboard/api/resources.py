"""
CRUD routes, generated once per entity type.
"""
import inspect
import logging
from typing import Any, Callable, Optional

from fastapi import APIRouter, Body, Depends, Query

from ..models.common import ErrorResponse, ItemResponse, ListResponse, MessageResponse
from ..services.query_filter import FilterSpec
from ..services.resources import ResourceDefinition, ResourceRegistry
from .routes import get_registry, require_user

logger = logging.getLogger(__name__)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Validation error"},
    401: {"model": ErrorResponse, "description": "Missing or invalid bearer token"},
    404: {"model": ErrorResponse, "description": "Record not found"},
    500: {"model": ErrorResponse, "description": "Storage failure"},
}

PARAMETER_DESCRIPTIONS = {
    "search": "Case-insensitive substring match across the searchable fields",
    "limit": "Page size; invalid values fall back to the default",
    "offset": "Records to skip; invalid values become 0",
}


def list_parameters(filters: FilterSpec) -> Callable[..., dict]:
    """
    Build a dependency declaring every query parameter ``filters`` recognizes.

    Parameters stay plain strings so malformed values reach the lenient
    parsers instead of failing request validation.
    """
    def dependency(**params: Optional[str]) -> dict:
        return {k: v for k, v in params.items() if v is not None}

    dependency.__signature__ = inspect.Signature([
        inspect.Parameter(
            name,
            inspect.Parameter.KEYWORD_ONLY,
            default=Query(
                None,
                description=PARAMETER_DESCRIPTIONS.get(name, f"Filter on {name}"),
            ),
            annotation=Optional[str],
        )
        for name in sorted(filters.parameters)
    ])
    return dependency


def build_resource_router(definition: ResourceDefinition) -> APIRouter:
    """
    Create the list/get/create/update/delete routes for one entity type.

    Handlers are plain functions so store I/O runs in the threadpool.
    """
    name = definition.name
    label = definition.label
    router = APIRouter(responses=ERROR_RESPONSES)

    def get_controller(registry: ResourceRegistry = Depends(get_registry)):
        return registry[name]

    @router.get("", response_model=ListResponse, summary=f"List {definition.plural}")
    def list_records(
        params: dict = Depends(list_parameters(definition.filters)),
        controller=Depends(get_controller),
    ):
        """
        List records with optional filtering and pagination.

        Query parameters: ``search``, the entity's categorical filters,
        ``limit`` and ``offset``.
        """
        data, meta = controller.list(params)
        return {"data": data, "meta": meta.to_dict()}

    @router.get("/{record_id}", summary=f"Get one {label.lower()}")
    def get_record(record_id: str, controller=Depends(get_controller)):
        return controller.get(record_id)

    @router.post(
        "",
        status_code=201,
        response_model=ItemResponse,
        summary=f"Create a {label.lower()}",
    )
    def create_record(
        payload: Any = Body(...),
        controller=Depends(get_controller),
        user: Optional[dict] = Depends(require_user),
    ):
        record = controller.create(payload)
        return {"message": f"{label} created successfully", "data": record}

    @router.put("/{record_id}", response_model=ItemResponse, summary=f"Update a {label.lower()}")
    def update_record(
        record_id: str,
        payload: Any = Body(...),
        controller=Depends(get_controller),
        user: Optional[dict] = Depends(require_user),
    ):
        record = controller.update(record_id, payload)
        return {"message": f"{label} updated successfully", "data": record}

    @router.delete(
        "/{record_id}",
        response_model=MessageResponse,
        summary=f"Delete a {label.lower()}",
    )
    def delete_record(
        record_id: str,
        controller=Depends(get_controller),
        user: Optional[dict] = Depends(require_user),
    ):
        controller.delete(record_id)
        return {"message": f"{label} deleted successfully"}

    return router
