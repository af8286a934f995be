"""Template API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends

from buildkeeper.exceptions import ValidationError
from buildkeeper.logger import get_logger
from buildkeeper.models.api import BuildRequest
from buildkeeper.models.build import BuildOutcome
from buildkeeper.models.template import BuildTemplate
from buildkeeper.services.container import ServiceContainer

from .dependencies import get_services

logger = get_logger(__name__)
router = APIRouter(prefix="/api/templates", tags=["templates"])

Services = Annotated[ServiceContainer, Depends(get_services)]


@router.get("", response_model=list[BuildTemplate], response_model_by_alias=True)
def list_templates(services: Services) -> list[BuildTemplate]:
    """List all stored templates."""
    return services.templates.list_all()


@router.get("/{name}", response_model=BuildTemplate, response_model_by_alias=True)
def get_template(name: str, services: Services) -> BuildTemplate:
    """Get a single template."""
    return services.templates.require(name)


@router.put("/{name}", response_model=BuildTemplate, response_model_by_alias=True)
def put_template(name: str, template: BuildTemplate, services: Services) -> BuildTemplate:
    """Register or replace a template."""
    if template.name != name:
        raise ValidationError("template.invalid", name=name, error=f"body names '{template.name}'")
    services.templates.save(template)
    return template


@router.post("/{name}/build", response_model=BuildOutcome)
def build_template(name: str, request: BuildRequest, services: Services) -> BuildOutcome:
    """
    Build a software from its template and activate the result.

    Blocks until the build finishes.
    """
    logger.info(f"Build requested via API: {name}")
    return services.driver.build(name, request.configuration, use_defaults=request.use_defaults)
