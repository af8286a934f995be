"""Build history and active-build API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from buildkeeper.exceptions import ResourceNotFoundError
from buildkeeper.models.api import SetActiveRequest, SetActiveResponse
from buildkeeper.models.build import BuildRecord
from buildkeeper.services.container import ServiceContainer

from .dependencies import get_services

router = APIRouter(prefix="/api/builds", tags=["builds"])

Services = Annotated[ServiceContainer, Depends(get_services)]


@router.get("", response_model=list[BuildRecord])
def get_history(services: Services, software: str | None = Query(default=None)) -> list[BuildRecord]:
    """Build history, newest first."""
    return services.builds.history(software)


@router.get("/active", response_model=list[BuildRecord])
def list_active(services: Services) -> list[BuildRecord]:
    """Active build of every software."""
    return services.builds.list_active()


@router.get("/{software}/active", response_model=BuildRecord)
def get_active(software: str, services: Services) -> BuildRecord:
    """Active build of one software."""
    record = services.builds.get_active(software)
    if record is None:
        raise ResourceNotFoundError("build.no_active", software=software)
    return record


@router.put("/{software}/active", response_model=SetActiveResponse)
def set_active(software: str, request: SetActiveRequest, services: Services) -> SetActiveResponse:
    """
    Switch the active build.

    An unknown commit leaves the registry untouched and reports activated=false.
    """
    activated = services.switch.activate(software, request.commit_hash)
    return SetActiveResponse(software=software, commit_hash=request.commit_hash, activated=activated)
