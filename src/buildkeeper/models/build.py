"""Build and repository record models."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class BuildRecord(BaseModel):
    """One (software, commit, configuration) build outcome and its install location."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    software: str
    git_hash: str
    build_datetime: datetime
    configuration: str
    install_path: str
    is_active: bool = False


class RepositoryRecord(BaseModel):
    """A tracked source checkout."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    software: str
    repo_url: str
    local_path: str
    last_updated: datetime
    branch: str
    current_hash: str | None = None


class BuildOutcome(BaseModel):
    """Result of a template-driven build."""

    build_id: int
    software: str
    commit_hash: str
    install_path: str
    configuration: str
    activated: bool
    duration_seconds: float
