from collections.abc import Iterator
from pathlib import Path

import pytest

from buildkeeper.models.app_config import AppConfig, PathsConfig
from buildkeeper.models.template import BuildTemplate
from buildkeeper.services.registry import BuildRegistry, Database, RepositoryRegistry
from buildkeeper.services.templates import TemplateStore


@pytest.fixture
def app_config(tmp_path: Path) -> AppConfig:
    return AppConfig(paths=PathsConfig(root_dir=tmp_path / "root"))


@pytest.fixture
def database(app_config: AppConfig) -> Iterator[Database]:
    assert app_config.paths.database_path is not None
    db = Database(app_config.paths.database_path)
    db.create_schema()
    yield db
    db.dispose()


@pytest.fixture
def builds(database: Database) -> BuildRegistry:
    return BuildRegistry(database)


@pytest.fixture
def repositories(database: Database) -> RepositoryRegistry:
    return RepositoryRegistry(database)


@pytest.fixture
def templates(app_config: AppConfig) -> TemplateStore:
    assert app_config.paths.templates_dir is not None
    return TemplateStore(app_config.paths.templates_dir)


@pytest.fixture
def llvm_template() -> BuildTemplate:
    return BuildTemplate(
        name="llvm",
        description="LLVM",
        repository="https://example.invalid/llvm-project.git",
        build_script="llvm",
        build_function="llvm",
        default_configuration={"BuildType": "Release", "Projects": ["clang"]},
        executable_patterns=["clang*", "llvm-*"],
    )
