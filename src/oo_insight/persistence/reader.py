"""Read saved runs back from the results database."""

import json
import sqlite3
from collections import defaultdict
from typing import Any

from ..detectors.models import Finding
from ..infrastructure.store import DataStore, ValueKind


def load_store(conn: sqlite3.Connection, run_id: int) -> DataStore:
    """Rebuild the data store of a saved run, one full namespace at a time.

    Raises
    ------
    ValueError
        If no run with that ID exists.
    """
    _require_run(conn, run_id)

    kinds: dict[str, str] = {}
    entries: dict[str, dict[str, Any]] = defaultdict(dict)
    rows = conn.execute(
        "SELECT namespace, kind, entity_key, value FROM store_entries WHERE run_id = ?",
        (run_id,),
    ).fetchall()
    for r in rows:
        kinds[r["namespace"]] = r["kind"]
        entries[r["namespace"]][r["entity_key"]] = json.loads(r["value"])

    store = DataStore()
    for namespace, kind in kinds.items():
        store.load_namespace(namespace, ValueKind(kind), entries[namespace])
    return store


def load_findings(conn: sqlite3.Connection, run_id: int) -> list[Finding]:
    _require_run(conn, run_id)
    rows = conn.execute(
        """
        SELECT entity_path, defect_name, project_path FROM findings
        WHERE run_id = ? ORDER BY entity_path, defect_name
        """,
        (run_id,),
    ).fetchall()
    return [Finding(r["entity_path"], r["defect_name"], r["project_path"]) for r in rows]


def load_metric_stats(conn: sqlite3.Connection, run_id: int) -> dict[str, dict]:
    """Finalized statistics per metric name, as saved."""
    _require_run(conn, run_id)
    rows = conn.execute(
        "SELECT * FROM metric_stats WHERE run_id = ? ORDER BY metric", (run_id,)
    ).fetchall()
    result: dict[str, dict] = {}
    for r in rows:
        stats = {k: r[k] for k in r.keys() if k not in ("run_id", "metric", "percentiles")}
        stats["percentiles"] = json.loads(r["percentiles"])
        result[r["metric"]] = stats
    return result


def list_runs(conn: sqlite3.Connection, limit: int = 20) -> list[dict]:
    """List recent runs with finding counts.

    Returns
    -------
    List[Dict]
        Dicts with keys: id, timestamp, project_name, project_paths,
        entity_count, finding_count, tool_version.
    """
    rows = conn.execute(
        """
        SELECT
            r.id,
            r.timestamp,
            r.project_name,
            r.project_paths,
            r.entity_count,
            r.tool_version,
            COUNT(f.id) AS finding_count
        FROM runs r
        LEFT JOIN findings f ON f.run_id = r.id
        GROUP BY r.id
        ORDER BY r.id DESC
        LIMIT ?
        """,
        (limit,),
    ).fetchall()

    return [
        {
            "id": r["id"],
            "timestamp": r["timestamp"],
            "project_name": r["project_name"],
            "project_paths": json.loads(r["project_paths"]),
            "entity_count": r["entity_count"],
            "finding_count": r["finding_count"],
            "tool_version": r["tool_version"],
        }
        for r in rows
    ]


def _require_run(conn: sqlite3.Connection, run_id: int) -> None:
    row = conn.execute("SELECT id FROM runs WHERE id = ?", (run_id,)).fetchone()
    if row is None:
        raise ValueError(f"No run with id={run_id}")
