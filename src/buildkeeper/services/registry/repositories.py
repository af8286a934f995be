"""Repository registry service."""

from datetime import datetime

from sqlalchemy import delete, select

from buildkeeper.logger import get_logger
from buildkeeper.models.build import RepositoryRecord

from .storage import Database, Repository

logger = get_logger(__name__)


class RepositoryRegistry:
    """Persists one row per tracked software checkout."""

    def __init__(self, database: Database) -> None:
        self.database = database

    def upsert(
        self,
        software: str,
        repo_url: str,
        local_path: str,
        branch: str,
        current_hash: str | None,
    ) -> RepositoryRecord:
        """
        Insert or update the repository row of a software.

        Args:
            software: Software name (natural key)
            repo_url: Remote URL
            local_path: Checkout directory
            branch: Checked out branch
            current_hash: HEAD commit after the refresh

        Returns:
            The stored record
        """
        with self.database.session_factory() as session:
            repo = session.scalars(select(Repository).where(Repository.software == software)).first()
            if repo is None:
                repo = Repository(software=software)
                session.add(repo)

            repo.repo_url = repo_url
            repo.local_path = local_path
            repo.branch = branch
            repo.current_hash = current_hash
            repo.last_updated = datetime.now()
            session.commit()

            logger.info(f"Tracked repository: software={software}, hash={current_hash}")
            return RepositoryRecord.model_validate(repo)

    def get(self, software: str) -> RepositoryRecord | None:
        with self.database.session_factory() as session:
            repo = session.scalars(select(Repository).where(Repository.software == software)).first()
            return RepositoryRecord.model_validate(repo) if repo is not None else None

    def list_all(self) -> list[RepositoryRecord]:
        with self.database.session_factory() as session:
            repos = session.scalars(select(Repository).order_by(Repository.software.asc()))
            return [RepositoryRecord.model_validate(r) for r in repos]

    def remove(self, software: str) -> bool:
        """
        Stop tracking a software.

        Returns:
            True if removed, False if not found
        """
        with self.database.session_factory() as session:
            result = session.execute(delete(Repository).where(Repository.software == software))
            session.commit()

        if result.rowcount:
            logger.info(f"Removed tracked repository: {software}")
            return True
        return False
