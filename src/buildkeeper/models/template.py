"""Build template models."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class BuildTemplate(BaseModel):
    """A named, file-persisted description of how to fetch and build a software package.

    Serialized with camelCase keys (templates/<name>.json).
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str
    description: str = ""
    repository: str
    build_script: str = Field(default="", alias="buildScript")  # Relative to the checkout root
    build_function: str = Field(alias="buildFunction")  # Key into the build routine registry
    default_configuration: dict[str, Any] = Field(default_factory=dict, alias="defaultConfiguration")
    configuration_schema: dict[str, Any] = Field(default_factory=dict, alias="configurationSchema")
    executable_patterns: list[str] = Field(default_factory=list, alias="executablePatterns")

    def to_document(self) -> dict[str, Any]:
        """JSON document as written to disk."""
        return self.model_dump(mode="json", by_alias=True)
