"""Build registry service.

Single source of truth for what was built and where. Rows are keyed by
(software, commit hash, configuration summary); at most one row per software
is active.
"""

from datetime import datetime

from sqlalchemy import select, update

from buildkeeper.logger import get_logger
from buildkeeper.models.build import BuildRecord

from .storage import Build, Database

logger = get_logger(__name__)


class BuildRegistry:
    """Upsert log of builds with an active flag per software.

    Storage errors from SQLAlchemy propagate to the caller; nothing is retried.
    """

    def __init__(self, database: Database) -> None:
        self.database = database

    def register(self, software: str, commit_hash: str, config_summary: str, install_path: str) -> int:
        """
        Record a build.

        A repeated registration of the same (software, commit_hash, config_summary)
        refreshes the timestamp and install path of the existing row.

        Args:
            software: Software name
            commit_hash: Commit the build was made from
            config_summary: Flattened configuration summary
            install_path: Install directory of the build

        Returns:
            Id of the new or existing row
        """
        with self.database.session_factory() as session:
            build = session.scalars(
                select(Build).where(
                    Build.software == software,
                    Build.git_hash == commit_hash,
                    Build.configuration == config_summary,
                )
            ).first()

            if build is not None:
                build.build_datetime = datetime.now()
                build.install_path = install_path
                session.commit()
                logger.info(f"Updated build registration: id={build.id}, software={software}, hash={commit_hash}")
                return build.id

            build = Build(
                software=software,
                git_hash=commit_hash,
                build_datetime=datetime.now(),
                configuration=config_summary,
                install_path=install_path,
                is_active=False,
            )
            session.add(build)
            session.commit()
            logger.info(f"Registered build: id={build.id}, software={software}, hash={commit_hash}")
            return build.id

    def set_active(self, software: str, commit_hash: str) -> bool:
        """
        Mark the build of (software, commit_hash) active.

        All rows for the software are cleared first. When no row matches, the
        clear is still persisted and the software is left without an active
        build. When several configurations exist for the hash, the most recently
        built one is activated.

        Returns:
            True if a row was activated, False if none matched
        """
        with self.database.session_factory() as session:
            session.execute(update(Build).where(Build.software == software).values(is_active=False))

            target = session.scalars(
                select(Build)
                .where(Build.software == software, Build.git_hash == commit_hash)
                .order_by(Build.build_datetime.desc(), Build.id.desc())
            ).first()

            if target is None:
                session.commit()
                logger.warning(f"No build of {software} at {commit_hash}; active build cleared")
                return False

            target.is_active = True
            session.commit()
            logger.info(f"Active build of {software} set to {commit_hash} (id={target.id})")
            return True

    def get_active(self, software: str) -> BuildRecord | None:
        """Return the active build of a software, if any."""
        with self.database.session_factory() as session:
            build = session.scalars(
                select(Build).where(Build.software == software, Build.is_active.is_(True)).order_by(Build.id.desc())
            ).first()
            return BuildRecord.model_validate(build) if build is not None else None

    def get(self, software: str, commit_hash: str) -> BuildRecord | None:
        """Return the most recent build of (software, commit_hash), if any."""
        with self.database.session_factory() as session:
            build = session.scalars(
                select(Build)
                .where(Build.software == software, Build.git_hash == commit_hash)
                .order_by(Build.build_datetime.desc(), Build.id.desc())
            ).first()
            return BuildRecord.model_validate(build) if build is not None else None

    def history(self, software: str | None = None) -> list[BuildRecord]:
        """
        List builds, newest first.

        Args:
            software: Restrict to one software; when omitted, rows are grouped
                by software name before ordering by time

        Returns:
            Build records
        """
        stmt = select(Build)
        if software is not None:
            stmt = stmt.where(Build.software == software).order_by(Build.build_datetime.desc(), Build.id.desc())
        else:
            stmt = stmt.order_by(Build.software.asc(), Build.build_datetime.desc(), Build.id.desc())

        with self.database.session_factory() as session:
            return [BuildRecord.model_validate(b) for b in session.scalars(stmt)]

    def list_active(self) -> list[BuildRecord]:
        """Active build of every software that has one."""
        with self.database.session_factory() as session:
            builds = session.scalars(select(Build).where(Build.is_active.is_(True)).order_by(Build.software.asc()))
            return [BuildRecord.model_validate(b) for b in builds]
