"""Template store service.

Keeps one JSON document per software under templates/<name>.json.
"""

import json
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from buildkeeper.exceptions import ResourceConflictError, ResourceNotFoundError, ValidationError
from buildkeeper.logger import get_logger
from buildkeeper.models.template import BuildTemplate
from buildkeeper.utils import get_resources_dir

logger = get_logger(__name__)

# Build function names used by older templates, mapped to routine registry keys
LEGACY_BUILD_FUNCTIONS: dict[str, str] = {
    "Build-LLVM": "llvm",
    "Invoke-LLVMBuild": "llvm",
    "Build-DotNet": "dotnet",
    "Invoke-DotNetBuild": "dotnet",
}


class TemplateStore:
    """Reads and writes build templates."""

    def __init__(self, templates_dir: Path) -> None:
        self.templates_dir = templates_dir

    def _path_for(self, name: str) -> Path:
        return self.templates_dir / f"{name}.json"

    def _load(self, path: Path, name: str) -> BuildTemplate:
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
            return BuildTemplate.model_validate(data)
        except (json.JSONDecodeError, PydanticValidationError) as e:
            raise ValidationError("template.invalid", name=name, error=str(e)) from e

    def exists(self, name: str) -> bool:
        return self._path_for(name).exists()

    def get(self, name: str) -> BuildTemplate | None:
        """
        Load a template by name.

        Returns:
            The template, or None if no file exists

        Raises:
            ValidationError: If the file is not a valid template
        """
        path = self._path_for(name)
        if not path.exists():
            return None
        return self._load(path, name)

    def require(self, name: str) -> BuildTemplate:
        """Load a template or raise ResourceNotFoundError."""
        template = self.get(name)
        if template is None:
            raise ResourceNotFoundError("template.not_found", name=name)
        return template

    def list_all(self) -> list[BuildTemplate]:
        """All readable templates, sorted by name."""
        if not self.templates_dir.exists():
            return []

        templates = []
        for path in sorted(self.templates_dir.glob("*.json")):
            try:
                templates.append(self._load(path, path.stem))
            except ValidationError as e:
                logger.error(f"Skipping unreadable template {path}: {e}")
        return templates

    def save(self, template: BuildTemplate, overwrite: bool = True) -> Path:
        """
        Write a template to disk.

        Raises:
            ResourceConflictError: If overwrite is False and the template exists
        """
        path = self._path_for(template.name)
        if path.exists() and not overwrite:
            raise ResourceConflictError("template.conflict", name=template.name)

        self.templates_dir.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(template.to_document(), f, indent=2, ensure_ascii=False)

        logger.info(f"Saved template: {path}")
        return path

    def register_file(self, source: Path, overwrite: bool = True) -> BuildTemplate:
        """Validate an external template file and store it under its name."""
        if not source.exists():
            raise ResourceNotFoundError("template.file_not_found", path=str(source))

        template = self._load(source, source.stem)
        self.save(template, overwrite=overwrite)
        return template

    def delete(self, name: str) -> bool:
        path = self._path_for(name)
        if not path.exists():
            return False
        path.unlink()
        logger.info(f"Deleted template: {name}")
        return True

    def install_defaults(self, overwrite: bool = False) -> list[str]:
        """
        Write the bundled default templates.

        Args:
            overwrite: Replace templates that already exist

        Returns:
            Names of the templates written
        """
        defaults_file = get_resources_dir() / "default_templates.json"
        with open(defaults_file, encoding="utf-8") as f:
            documents = json.load(f)

        written = []
        for document in documents:
            template = BuildTemplate.model_validate(document)
            if self.exists(template.name) and not overwrite:
                logger.debug(f"Default template {template.name} already present")
                continue
            self.save(template)
            written.append(template.name)
        return written

    def migrate_build_functions(self, renames: dict[str, str] | None = None) -> list[str]:
        """
        Rewrite build function identifiers of stored templates.

        Args:
            renames: Old identifier -> routine key; defaults to LEGACY_BUILD_FUNCTIONS

        Returns:
            Names of the templates that changed
        """
        renames = LEGACY_BUILD_FUNCTIONS if renames is None else renames

        changed = []
        for template in self.list_all():
            new_key = renames.get(template.build_function)
            if new_key is None or new_key == template.build_function:
                continue
            logger.info(f"Migrating template {template.name}: {template.build_function} -> {new_key}")
            template.build_function = new_key
            self.save(template)
            changed.append(template.name)
        return changed
