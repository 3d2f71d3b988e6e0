"""PostgreSQL persistence for experiment definitions."""

import logging
import uuid
from typing import Any, Dict, List, Mapping, Optional

from torii.db import DatabaseClient
from torii.experiments import Experiment, random_petname
from torii.logging_utils import perf

LOGGER = logging.getLogger(__name__)

SCHEMA_SQL = """
    CREATE TABLE IF NOT EXISTS experiments (
        id SERIAL PRIMARY KEY,
        uuid TEXT NOT NULL UNIQUE,
        name TEXT NOT NULL,
        provider TEXT NOT NULL,
        cc TEXT NOT NULL DEFAULT '',
        comment TEXT NOT NULL DEFAULT '',
        max TEXT NOT NULL DEFAULT '',
        endpoint_remote TEXT NOT NULL DEFAULT '',
        created_at TIMESTAMPTZ NOT NULL DEFAULT now()
    )
"""

INSERT_SQL = """
    INSERT INTO experiments (uuid, name, provider, cc, comment, max, endpoint_remote)
    VALUES (
        %(uuid)s,
        %(name)s,
        %(provider)s,
        %(cc)s,
        %(comment)s,
        %(max)s,
        %(endpoint_remote)s
    )
    RETURNING id
"""

SELECT_COLUMNS = "id, uuid, name, provider, cc, comment, max, endpoint_remote"
LIST_SQL = f"SELECT {SELECT_COLUMNS} FROM experiments ORDER BY id"
GET_SQL = f"SELECT {SELECT_COLUMNS} FROM experiments WHERE uuid = %(uuid)s"


class ExperimentNotFoundError(LookupError):
    """Raised when an experiment UUID is not in the store."""


def _from_row(row: Mapping[str, Any]) -> Experiment:
    return Experiment(
        id=int(row["id"]),
        uuid=row["uuid"],
        name=row["name"],
        provider=row["provider"],
        country_code=row["cc"],
        comment=row["comment"],
        max=row["max"],
        endpoint_remote=row["endpoint_remote"],
    )


class ExperimentStore:
    """Add, list and look up experiments."""

    def __init__(self, db_client: DatabaseClient) -> None:
        self._db = db_client

    def ensure_schema(self) -> None:
        self._db.execute(SCHEMA_SQL)

    @perf("store.add_experiment", tags={"component": "store"})
    def add(self, exp: Experiment) -> str:
        """Persist ``exp`` and return its new UUID.

        Assigns a random two-word name when the experiment has none. The
        generated UUID and database id are written back onto ``exp``.
        """
        if not exp.name:
            exp.name = random_petname()
            LOGGER.info("Assigned experiment name: %s", exp.name)
        exp.uuid = uuid.uuid4().hex

        params: Dict[str, Any] = {
            "uuid": exp.uuid,
            "name": exp.name,
            "provider": exp.provider,
            "cc": exp.country_code,
            "comment": exp.comment,
            "max": exp.max,
            "endpoint_remote": exp.endpoint_remote,
        }
        row = self._db.fetch_one(INSERT_SQL, params)
        if row is not None:
            exp.id = int(row["id"])
        LOGGER.info("Stored experiment %s (%s) for %s", exp.uuid, exp.name, exp.provider)
        return exp.uuid

    def list_all(self) -> List[Experiment]:
        return [_from_row(row) for row in self._db.fetch_all(LIST_SQL)]

    def get_by_uuid(self, exp_uuid: str) -> Optional[Experiment]:
        row = self._db.fetch_one(GET_SQL, {"uuid": exp_uuid})
        return _from_row(row) if row else None


__all__ = ["ExperimentNotFoundError", "ExperimentStore"]
