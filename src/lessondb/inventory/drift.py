"""Schema-drift detection and recovery for collections whose shape changed over time.

A collection has drifted when its table lacks columns the current model
expects, has required columns the model does not know about, or holds rows
with no value in a required column. Detection returns
a typed ``ShapeMismatch`` instead of raising, so callers can tell drift apart
from ordinary storage errors and hand it to a ``DriftRecovery`` strategy.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

import structlog
from sqlalchemy import inspect, literal, or_, select

from lessondb.database import StorageGateway
from lessondb.errors import SchemaDriftError

if TYPE_CHECKING:
    from sqlalchemy import Table
    from sqlalchemy.orm import Session

logger = structlog.get_logger()


@dataclass(frozen=True)
class ShapeMismatch:
    """A collection whose stored shape no longer matches its model."""

    collection: str
    detail: str


def probe_collection_shape(session: Session, table: Table) -> ShapeMismatch | None:
    """
    Compare the stored table against ``table``.

    A missing table is created on the spot and is not a mismatch.
    """
    connection = session.connection()
    inspector = inspect(connection)
    if not inspector.has_table(table.name):
        table.create(connection)
        return None

    stored_columns = inspector.get_columns(table.name)
    stored = {column["name"] for column in stored_columns}
    missing = sorted(column.name for column in table.columns if column.name not in stored)
    if missing:
        return ShapeMismatch(table.name, f"missing columns: {', '.join(missing)}")

    # columns the model no longer writes must accept NULL or carry a default
    blocking = sorted(
        column["name"]
        for column in stored_columns
        if column["name"] not in table.columns and not column["nullable"] and column.get("default") is None
    )
    if blocking:
        return ShapeMismatch(table.name, f"unknown required columns: {', '.join(blocking)}")

    required = [column for column in table.columns if not column.nullable]
    if required:
        hole = session.scalar(
            select(literal(1)).select_from(table).where(or_(*(column.is_(None) for column in required))).limit(1)
        )
        if hole is not None:
            return ShapeMismatch(table.name, "rows with empty required columns")

    return None


class DriftRecovery(Protocol):
    """Strategy applied when a collection is found to have drifted."""

    def recover(self, session: Session, table: Table, mismatch: ShapeMismatch) -> None: ...


class DropCollection:
    """Discard the drifted collection and recreate it empty.

    Every row previously stored in the collection is lost.
    """

    def recover(self, session: Session, table: Table, mismatch: ShapeMismatch) -> None:
        logger.warning("collection_drift_detected", collection=mismatch.collection, detail=mismatch.detail)
        StorageGateway.drop_collection(session, table)


class RaiseOnDrift:
    """Leave the collection untouched and surface the drift to the caller."""

    def recover(self, session: Session, table: Table, mismatch: ShapeMismatch) -> None:  # noqa: ARG002
        raise SchemaDriftError(mismatch.collection, mismatch.detail)
