import json
import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import Result
from sqlalchemy.orm import Session, sessionmaker

from jobboard.core.config import Settings
from jobboard.db.tables import REQUIRED_TABLES, metadata

log = logging.getLogger(__name__)


class Database:
    """
    Handle on the Supabase Postgres database.

    One instance per process, created at start-up and stored on app.state.
    Request handlers get it through the get_db dependency.
    """

    def __init__(self, url: str, echo: bool = False, **engine_kwargs):
        self.engine = create_engine(url, echo=echo, **engine_kwargs)
        # Session factory
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        # pool_size=5: maintain 5 connections ready
        # max_overflow=10: allow 10 extra connections under load
        return cls(
            settings.database_url,
            echo=settings.debug,
            pool_size=5,
            max_overflow=10,
            pool_pre_ping=True,
        )

    @property
    def is_postgres(self) -> bool:
        return self.engine.dialect.name == "postgresql"

    @contextmanager
    def session(self, claims: Optional[dict] = None, anonymous: bool = False) -> Iterator[Session]:
        """
        Context manager for database sessions.

        With claims, the transaction runs as the `authenticated` role with the
        caller's JWT claims installed, so the row level security policies
        (auth.uid()) apply. With anonymous=True it runs as the `anon`
        role. Otherwise it runs with the connection's own (service) privileges.

        Usage:
            with db.session(user.claims) as s:
                s.execute(select(resumes))
        """
        session = self.SessionLocal()
        try:
            if claims is not None and self.is_postgres:
                session.execute(text("SET LOCAL ROLE authenticated"))
                session.execute(
                    text("SELECT set_config('request.jwt.claims', :claims, true)"),
                    {"claims": json.dumps(claims)}
                )
            elif anonymous and self.is_postgres:
                session.execute(text("SET LOCAL ROLE anon"))
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def for_caller(self, auth_session=None):
        """Session scoped to the caller: their claims, or `anon` when signed out."""
        if auth_session is None:
            return self.session(anonymous=True)
        return self.session(auth_session.claims)

    def ping(self) -> bool:
        """
        Test if the database is reachable.
        Returns True if connection successful, False otherwise.
        """
        try:
            with self.session() as s:
                return s.execute(text("SELECT 1")).scalar() == 1
        except Exception as e:
            log.warning("Database connection failed: %s", e)
            return False

    def existing_tables(self) -> List[str]:
        names = set(inspect(self.engine).get_table_names())
        return [t for t in REQUIRED_TABLES if t in names]

    def create_missing_tables(self) -> List[str]:
        """Create any missing tables. Returns the names that were created."""
        missing = [t for t in REQUIRED_TABLES if t not in self.existing_tables()]
        if missing:
            metadata.create_all(self.engine, tables=[metadata.tables[t] for t in missing])
            log.info("Created tables: %s", ", ".join(missing))
        return missing

    def dispose(self) -> None:
        self.engine.dispose()


def rows_to_dicts(result: Result) -> list:
    """Convert a result to a list of dicts keyed by column label."""
    return [dict(row._mapping) for row in result]
