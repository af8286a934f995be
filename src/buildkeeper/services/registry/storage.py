"""
SQLAlchemy storage for the build registry.

Two tables live in a single SQLite file:
- Repositories: one row per tracked source checkout
- Builds: one row per (software, commit, configuration) build
"""

from datetime import datetime
from pathlib import Path

from sqlalchemy import Boolean, DateTime, Engine, Integer, String, Text, create_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker

from buildkeeper.logger import get_logger

logger = get_logger(__name__)


class Base(DeclarativeBase):
    """Base class for all models."""


class Repository(Base):
    """Tracked source checkout. Software is the natural key."""

    __tablename__ = "Repositories"

    id: Mapped[int] = mapped_column("Id", Integer, primary_key=True, autoincrement=True)
    software: Mapped[str] = mapped_column("Software", String(255), unique=True, nullable=False)
    repo_url: Mapped[str] = mapped_column("RepoUrl", Text, nullable=False)
    local_path: Mapped[str] = mapped_column("LocalPath", Text, nullable=False)
    last_updated: Mapped[datetime] = mapped_column("LastUpdated", DateTime, default=datetime.now, nullable=False)
    branch: Mapped[str] = mapped_column("Branch", String(255), nullable=False)
    current_hash: Mapped[str | None] = mapped_column("CurrentHash", String(64), nullable=True)

    def __repr__(self) -> str:
        return f"<Repository(id={self.id}, software='{self.software}', hash='{self.current_hash}')>"


class Build(Base):
    """One build outcome. Natural key is (software, git_hash, configuration)."""

    __tablename__ = "Builds"

    id: Mapped[int] = mapped_column("Id", Integer, primary_key=True, autoincrement=True)
    software: Mapped[str] = mapped_column("Software", String(255), nullable=False, index=True)
    git_hash: Mapped[str] = mapped_column("GitHash", String(64), nullable=False)
    build_datetime: Mapped[datetime] = mapped_column("BuildDateTime", DateTime, default=datetime.now, nullable=False)
    configuration: Mapped[str] = mapped_column("Configuration", Text, nullable=False, default="")
    install_path: Mapped[str] = mapped_column("InstallPath", Text, nullable=False)
    is_active: Mapped[bool] = mapped_column("IsActive", Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        return f"<Build(id={self.id}, software='{self.software}', hash='{self.git_hash}', active={self.is_active})>"


class Database:
    """Owns the engine and session factory for the registry file."""

    def __init__(self, database_path: Path) -> None:
        self.database_path = database_path
        self.database_path.parent.mkdir(parents=True, exist_ok=True)
        self.engine: Engine = create_engine(f"sqlite:///{database_path}")
        self.session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)

    def create_schema(self) -> None:
        """Create missing tables."""
        Base.metadata.create_all(self.engine)
        logger.debug(f"Registry schema ready at {self.database_path}")

    def dispose(self) -> None:
        self.engine.dispose()
