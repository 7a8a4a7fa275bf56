"""Routes for customize changesets."""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Path, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from changesets_api.api.deps import get_changesets_service, get_changesets_service_read

from .schemas import (
    UUID_PATTERN,
    ChangesetCreate,
    ChangesetDeleted,
    ChangesetListQuery,
    ChangesetOut,
    ChangesetWrite,
    RequestContext,
)
from .service import ChangesetsService

router = APIRouter(prefix="/changesets", tags=["changesets"])

# Parameters that accept ``name[]=a&name[]=b`` as well as repeated or CSV values.
ARRAY_QUERY_PARAMS = frozenset({"author", "author_exclude", "status"})

CHANGESET_UUID_PARAM = Annotated[
    str,
    Path(
        description="Changeset UUID.",
        pattern=UUID_PATTERN,
    ),
]
CONTEXT_QUERY = Annotated[
    RequestContext,
    Query(description="Scope under which the request is made; determines fields present."),
]
CHANGESET_CREATE_BODY = Body(None, description="Changeset fields to create.")
CHANGESET_UPDATE_BODY = Body(None, description="Changeset fields to update.")

ServiceDep = Annotated[ChangesetsService, Depends(get_changesets_service)]
ReadServiceDep = Annotated[ChangesetsService, Depends(get_changesets_service_read)]


def changeset_list_query(request: Request) -> ChangesetListQuery:
    """Collect collection parameters, folding ``name[]`` and repeated keys into lists."""

    raw: dict[str, Any] = {}
    for key, value in request.query_params.multi_items():
        name = key[:-2] if key.endswith("[]") else key
        if name in ARRAY_QUERY_PARAMS:
            raw.setdefault(name, []).append(value)
        else:
            raw[name] = value
    try:
        return ChangesetListQuery.model_validate(raw)
    except ValidationError as exc:
        raise RequestValidationError(
            [{**error, "loc": ("query", *error["loc"])} for error in exc.errors(include_url=False)]
        ) from exc


@router.get(
    "",
    response_model=list[ChangesetOut],
    status_code=status.HTTP_200_OK,
    summary="List changesets",
    responses={
        status.HTTP_400_BAD_REQUEST: {"description": "Invalid collection parameters."},
        status.HTTP_401_UNAUTHORIZED: {"description": "Authentication required."},
        status.HTTP_403_FORBIDDEN: {"description": "Listing is not permitted."},
    },
)
def list_changesets(
    request: Request,
    params: Annotated[ChangesetListQuery, Depends(changeset_list_query)],
    service: ReadServiceDep,
) -> JSONResponse:
    items, headers = service.list_changesets(params, base_url=request.url)
    return JSONResponse(content=items, headers=headers)


@router.post(
    "",
    response_model=ChangesetOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a changeset",
    responses={
        status.HTTP_400_BAD_REQUEST: {"description": "Invalid changeset fields."},
        status.HTTP_401_UNAUTHORIZED: {"description": "Authentication required."},
        status.HTTP_403_FORBIDDEN: {"description": "Creating changesets is not permitted."},
    },
)
def create_changeset(
    request: Request,
    service: ServiceDep,
    payload: ChangesetCreate | None = CHANGESET_CREATE_BODY,
) -> JSONResponse:
    result = service.create_changeset(payload or ChangesetCreate())
    location = str(request.url_for("get_changeset", uuid=result.uuid))
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=result.data,
        headers={"Location": location},
    )


@router.get(
    "/{uuid}",
    name="get_changeset",
    response_model=ChangesetOut,
    status_code=status.HTTP_200_OK,
    summary="Retrieve a changeset",
    responses={
        status.HTTP_404_NOT_FOUND: {"description": "Changeset not found."},
    },
)
def get_changeset(
    uuid: CHANGESET_UUID_PARAM,
    service: ReadServiceDep,
    context: CONTEXT_QUERY = "view",
) -> JSONResponse:
    return JSONResponse(content=service.get_changeset(uuid, context=context))


@router.api_route(
    "/{uuid}",
    methods=["PUT", "PATCH"],
    response_model=ChangesetOut,
    status_code=status.HTTP_200_OK,
    summary="Update a changeset",
    responses={
        status.HTTP_400_BAD_REQUEST: {"description": "Invalid changeset fields."},
        status.HTTP_404_NOT_FOUND: {"description": "Changeset not found."},
    },
)
def update_changeset(
    uuid: CHANGESET_UUID_PARAM,
    service: ServiceDep,
    payload: ChangesetWrite | None = CHANGESET_UPDATE_BODY,
) -> JSONResponse:
    return JSONResponse(content=service.update_changeset(uuid, payload or ChangesetWrite()))


@router.delete(
    "/{uuid}",
    response_model=ChangesetOut | ChangesetDeleted,
    status_code=status.HTTP_200_OK,
    summary="Trash or permanently delete a changeset",
    responses={
        status.HTTP_404_NOT_FOUND: {"description": "Changeset not found."},
        status.HTTP_410_GONE: {"description": "Changeset is already in the trash."},
    },
)
def delete_changeset(
    uuid: CHANGESET_UUID_PARAM,
    service: ServiceDep,
    force: Annotated[bool, Query(description="Bypass the trash and delete permanently.")] = False,
) -> JSONResponse:
    return JSONResponse(content=service.delete_changeset(uuid, force=force))


__all__ = ["changeset_list_query", "router"]
