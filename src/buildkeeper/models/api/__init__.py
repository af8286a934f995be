"""API request and response models."""

from .builds import BuildRequest, RemoveRepositoryResponse, SetActiveRequest, SetActiveResponse

__all__ = ["BuildRequest", "RemoveRepositoryResponse", "SetActiveRequest", "SetActiveResponse"]
