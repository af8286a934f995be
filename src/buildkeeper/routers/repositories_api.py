"""Tracked repository API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from buildkeeper.models.api import RemoveRepositoryResponse
from buildkeeper.models.build import RepositoryRecord
from buildkeeper.services.container import ServiceContainer

from .dependencies import get_services

router = APIRouter(prefix="/api/repositories", tags=["repositories"])

Services = Annotated[ServiceContainer, Depends(get_services)]


@router.get("", response_model=list[RepositoryRecord])
def get_repositories(services: Services) -> list[RepositoryRecord]:
    """List tracked repositories."""
    return services.repositories.list_all()


@router.delete("/{software}", response_model=RemoveRepositoryResponse)
def remove_repository(
    software: str,
    services: Services,
    delete_checkout: bool = Query(default=False),
) -> RemoveRepositoryResponse:
    """Stop tracking a repository, optionally deleting its checkout."""
    removed = services.tracker.remove(software, delete_checkout=delete_checkout)
    return RemoveRepositoryResponse(software=software, removed=removed)
