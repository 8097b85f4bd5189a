"""
src/data/store.py
─────────────────
SQLite data store abstraction.

One table per entity type, addressed by entity name:

    site · reading · fault · prediction · maintenance · evaluation

Provides, per entity:
  - create(entity, record)                 : insert, assign id + created_date
  - list(entity, order, limit)             : all records, ordered
  - filter(entity, fields, order, limit)   : equality match on columns
  - update(entity, record_id, fields)      : partial update, returns record
  - get(entity, record_id)                 : single record or None

Order tokens are column names, prefixed with "-" for descending
("-created_date" = newest first). Ties keep insertion order.

List-valued fields are stored as JSON text. Every sqlite3 failure surfaces
as StoreError so callers can log-and-continue without importing sqlite3.

Thread safety: uses check_same_thread=False + an instance-level lock.
"""
from __future__ import annotations

import json
import sqlite3
import threading
import uuid
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import UTC, date, datetime
from enum import Enum
from typing import Any

import pandas as pd

from config.settings import settings
from src.data.models import (
    EvaluationResult,
    Fault,
    MaintenanceAction,
    Prediction,
    Record,
    Site,
    TelemetryReading,
)


class StoreError(Exception):
    """A persistence operation failed."""


class RecordNotFoundError(StoreError):
    """A write addressed a record id that does not exist."""


class UnknownEntityError(StoreError):
    """The entity name is not one of the registered tables."""


# ── Schema ────────────────────────────────────────────────────────────────────

_CREATE_SITES = """
CREATE TABLE IF NOT EXISTS sites (
    id                    TEXT PRIMARY KEY,
    created_date          TEXT NOT NULL,
    site_id               TEXT NOT NULL UNIQUE,
    name                  TEXT NOT NULL,
    location              TEXT NOT NULL DEFAULT '',
    site_type             TEXT NOT NULL,
    capacity_mw           REAL NOT NULL DEFAULT 0,
    inverter_count        INTEGER NOT NULL DEFAULT 0,
    commissioned_date     TEXT,
    last_maintenance_date TEXT,
    health_score          REAL NOT NULL DEFAULT 100.0,
    status                TEXT NOT NULL DEFAULT 'operational'
);
"""

_CREATE_READINGS = """
CREATE TABLE IF NOT EXISTS readings (
    id                TEXT PRIMARY KEY,
    created_date      TEXT NOT NULL,
    site_id           TEXT NOT NULL,
    timestamp         TEXT NOT NULL,
    voltage_kv        REAL,
    current_a         REAL,
    frequency_hz      REAL,
    power_kw          REAL,
    energy_kwh        REAL,
    power_factor      REAL,
    inverter_temp_c   REAL,
    dc_link_voltage_v REAL,
    breaker_status    TEXT NOT NULL DEFAULT 'CLOSED',
    relay_event       TEXT NOT NULL DEFAULT 'NONE',
    latency_ms        REAL,
    packet_loss_pct   REAL,
    thd_pct           REAL,
    irradiance_wm2    REAL
);
"""

_CREATE_FAULTS = """
CREATE TABLE IF NOT EXISTS faults (
    id                      TEXT PRIMARY KEY,
    created_date            TEXT NOT NULL,
    fault_id                TEXT NOT NULL,
    site_id                 TEXT NOT NULL,
    fault_type              TEXT NOT NULL,
    severity                TEXT NOT NULL,
    status                  TEXT NOT NULL DEFAULT 'active',
    start_timestamp         TEXT NOT NULL,
    trigger_condition       TEXT NOT NULL DEFAULT '',
    observable_symptoms     TEXT NOT NULL DEFAULT '[]',
    detected_by_ai          INTEGER NOT NULL DEFAULT 0,
    detection_lead_time_min REAL
);
"""

_CREATE_PREDICTIONS = """
CREATE TABLE IF NOT EXISTS predictions (
    id                            TEXT PRIMARY KEY,
    created_date                  TEXT NOT NULL,
    site_id                       TEXT NOT NULL,
    timestamp                     TEXT NOT NULL,
    predicted_fault_type          TEXT NOT NULL,
    fault_probability             REAL NOT NULL,
    estimated_time_to_failure_min REAL NOT NULL,
    confidence_level              TEXT NOT NULL,
    contributing_factors          TEXT NOT NULL DEFAULT '[]',
    model_version                 TEXT NOT NULL,
    was_accurate                  INTEGER
);
"""

_CREATE_MAINTENANCE = """
CREATE TABLE IF NOT EXISTS maintenance_actions (
    id                               TEXT PRIMARY KEY,
    created_date                     TEXT NOT NULL,
    site_id                          TEXT NOT NULL,
    recommended_action               TEXT NOT NULL,
    priority                         TEXT NOT NULL,
    justification                    TEXT NOT NULL DEFAULT '[]',
    estimated_repair_cost_usd        REAL NOT NULL,
    estimated_downtime_if_ignored_hr REAL NOT NULL,
    estimated_completion_time_hr     REAL NOT NULL DEFAULT 0,
    status                           TEXT NOT NULL DEFAULT 'pending',
    triggered_by_prediction_id       TEXT
);
"""

_CREATE_EVALUATIONS = """
CREATE TABLE IF NOT EXISTS evaluations (
    id                                 TEXT PRIMARY KEY,
    created_date                       TEXT NOT NULL,
    evaluation_date                    TEXT NOT NULL,
    evaluation_period_days             INTEGER NOT NULL,
    total_faults_detected              INTEGER NOT NULL,
    true_positives                     INTEGER NOT NULL,
    false_positives                    INTEGER NOT NULL,
    false_negatives                    INTEGER NOT NULL,
    true_negatives                     INTEGER NOT NULL,
    precision                          REAL NOT NULL,
    recall                             REAL NOT NULL,
    f1_score                           REAL NOT NULL,
    false_alarm_rate                   REAL NOT NULL,
    avg_early_warning_lead_time_min    REAL NOT NULL,
    baseline_detection_time_min        REAL NOT NULL,
    ai_detection_time_min              REAL NOT NULL,
    fault_isolation_time_reduction_pct REAL NOT NULL,
    downtime_prevented_hr              REAL NOT NULL,
    cost_savings_usd                   REAL NOT NULL,
    model_version                      TEXT NOT NULL
);
"""

_CREATE_IDX = """
CREATE INDEX IF NOT EXISTS idx_readings_site_created    ON readings            (site_id, created_date);
CREATE INDEX IF NOT EXISTS idx_faults_site_created      ON faults              (site_id, created_date);
CREATE INDEX IF NOT EXISTS idx_predictions_site_created ON predictions         (site_id, created_date);
CREATE INDEX IF NOT EXISTS idx_maintenance_prediction   ON maintenance_actions (triggered_by_prediction_id);
"""


@dataclass(frozen=True)
class EntityMeta:
    table: str
    model: type[Record]
    json_columns: frozenset[str] = frozenset()

    @property
    def columns(self) -> tuple[str, ...]:
        return tuple(self.model.model_fields)


ENTITIES: dict[str, EntityMeta] = {
    "site": EntityMeta("sites", Site),
    "reading": EntityMeta("readings", TelemetryReading),
    "fault": EntityMeta("faults", Fault, frozenset({"observable_symptoms"})),
    "prediction": EntityMeta("predictions", Prediction, frozenset({"contributing_factors"})),
    "maintenance": EntityMeta("maintenance_actions", MaintenanceAction, frozenset({"justification"})),
    "evaluation": EntityMeta("evaluations", EvaluationResult),
}


# ── Row conversion ────────────────────────────────────────────────────────────

def _to_db(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, datetime):
        # Fixed width UTC text so lexical order matches time order
        return value.astimezone(UTC).isoformat(timespec="microseconds")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return json.dumps(list(value))
    return value


def _to_row(meta: EntityMeta, record: Record) -> dict[str, Any]:
    return {column: _to_db(getattr(record, column)) for column in meta.columns}


def _from_row(meta: EntityMeta, row: sqlite3.Row) -> Record:
    data = dict(row)
    for column in meta.json_columns:
        raw = data.get(column)
        data[column] = json.loads(raw) if raw else []
    return meta.model.model_validate(data)


def to_dataframe(records: list[Record]) -> pd.DataFrame:
    """Convert a list of records to a pandas DataFrame."""
    return pd.DataFrame([r.model_dump() for r in records])


# ── Store ─────────────────────────────────────────────────────────────────────

class Store:
    """Per-entity create / list / filter / update over one SQLite connection."""

    def __init__(
        self,
        database_url: str = settings.DATABASE_URL,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        self._lock = threading.RLock()
        self._now = now or (lambda: datetime.now(tz=UTC))
        with self._guard("connect"):
            self._conn = sqlite3.connect(database_url, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            with self._conn:
                self._conn.executescript(
                    _CREATE_SITES
                    + _CREATE_READINGS
                    + _CREATE_FAULTS
                    + _CREATE_PREDICTIONS
                    + _CREATE_MAINTENANCE
                    + _CREATE_EVALUATIONS
                    + _CREATE_IDX
                )

    # ── Helpers ───────────────────────────────────────────────────────────────

    @contextmanager
    def _guard(self, operation: str) -> Iterator[None]:
        try:
            yield
        except sqlite3.Error as exc:
            raise StoreError(f"{operation} failed: {exc}") from exc

    @staticmethod
    def _meta(entity: str) -> EntityMeta:
        try:
            return ENTITIES[entity]
        except KeyError:
            raise UnknownEntityError(f"Unknown entity: {entity!r}") from None

    @staticmethod
    def _check_columns(meta: EntityMeta, names: Mapping[str, Any] | tuple[str, ...]) -> None:
        unknown = [n for n in names if n not in meta.columns]
        if unknown:
            raise StoreError(f"Unknown field(s) for {meta.table}: {', '.join(unknown)}")

    @staticmethod
    def _order_by(meta: EntityMeta, order: str | None) -> str:
        if not order:
            return "ORDER BY rowid ASC"
        descending = order.startswith("-")
        column = order.lstrip("-")
        Store._check_columns(meta, (column,))
        direction = "DESC" if descending else "ASC"
        return f"ORDER BY {column} {direction}, rowid {direction}"

    def _select(
        self,
        meta: EntityMeta,
        where: str,
        params: list[Any],
        order: str | None,
        limit: int | None,
    ) -> list[Record]:
        sql = f"SELECT * FROM {meta.table} {where} {self._order_by(meta, order)}"
        if limit is not None:
            sql += " LIMIT ?"
            params = [*params, int(limit)]
        with self._lock, self._guard(f"select {meta.table}"):
            rows = self._conn.execute(sql, params).fetchall()
        return [_from_row(meta, row) for row in rows]

    # ── Public API ────────────────────────────────────────────────────────────

    def create(self, entity: str, record: Record | Mapping[str, Any]) -> Record:
        """Insert a record and return it with `id` and `created_date` set."""
        meta = self._meta(entity)
        if not isinstance(record, meta.model):
            record = meta.model.model_validate(dict(record))
        saved = record.model_copy(update={"id": uuid.uuid4().hex, "created_date": self._now()})
        row = _to_row(meta, saved)
        columns = ", ".join(row)
        placeholders = ", ".join("?" for _ in row)
        with self._lock, self._guard(f"insert {meta.table}"), self._conn:
            self._conn.execute(
                f"INSERT INTO {meta.table} ({columns}) VALUES ({placeholders})",
                list(row.values()),
            )
        return saved

    def list(self, entity: str, order: str | None = "-created_date", limit: int | None = None) -> list:
        meta = self._meta(entity)
        return self._select(meta, "", [], order, limit)

    def filter(
        self,
        entity: str,
        fields: Mapping[str, Any],
        order: str | None = "-created_date",
        limit: int | None = None,
    ) -> list:
        """Records whose columns equal every value in `fields`."""
        meta = self._meta(entity)
        self._check_columns(meta, fields)
        clauses = []
        params: list[Any] = []
        for column, value in fields.items():
            if value is None:
                clauses.append(f"{column} IS NULL")
            else:
                clauses.append(f"{column} = ?")
                params.append(_to_db(value))
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        return self._select(meta, where, params, order, limit)

    def get(self, entity: str, record_id: str) -> Record | None:
        meta = self._meta(entity)
        records = self._select(meta, "WHERE id = ?", [record_id], None, 1)
        return records[0] if records else None

    def update(self, entity: str, record_id: str, fields: Mapping[str, Any]) -> Record:
        """
        Apply a partial update and return the updated record.

        Raises RecordNotFoundError if no record has `record_id`, and
        pydantic.ValidationError if the merged record is invalid.
        """
        meta = self._meta(entity)
        self._check_columns(meta, fields)
        with self._lock:
            current = self.get(entity, record_id)
            if current is None:
                raise RecordNotFoundError(f"{entity} {record_id!r} not found")
            merged = meta.model.model_validate({**current.model_dump(), **dict(fields)})
            row = _to_row(meta, merged)
            assignments = ", ".join(f"{column} = ?" for column in fields)
            params = [row[column] for column in fields] + [record_id]
            with self._guard(f"update {meta.table}"), self._conn:
                self._conn.execute(f"UPDATE {meta.table} SET {assignments} WHERE id = ?", params)
        return merged

    def count(self, entity: str, fields: Mapping[str, Any] | None = None) -> int:
        meta = self._meta(entity)
        where = ""
        params: list[Any] = []
        if fields:
            self._check_columns(meta, fields)
            where = "WHERE " + " AND ".join(f"{c} = ?" for c in fields)
            params = [_to_db(v) for v in fields.values()]
        with self._lock, self._guard(f"count {meta.table}"):
            return self._conn.execute(f"SELECT COUNT(*) FROM {meta.table} {where}", params).fetchone()[0]

    def seed_sites(self, sites: list[Site]) -> int:
        """Register the fleet if the site table is empty. Returns rows added."""
        if self.count("site") > 0:
            return 0
        for site in sites:
            self.create("site", site)
        return len(sites)

    def close(self) -> None:
        with self._lock:
            self._conn.close()
