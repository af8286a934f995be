"""API models for build operations."""

from typing import Any

from pydantic import BaseModel, Field


class BuildRequest(BaseModel):
    """Build a software from its template."""

    use_defaults: bool = True
    configuration: dict[str, Any] = Field(default_factory=dict)


class SetActiveRequest(BaseModel):
    """Switch the active build of a software."""

    commit_hash: str


class SetActiveResponse(BaseModel):
    software: str
    commit_hash: str
    activated: bool


class RemoveRepositoryResponse(BaseModel):
    software: str
    removed: bool
