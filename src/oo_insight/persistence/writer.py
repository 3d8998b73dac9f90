"""Write a finished AnalysisResult into the results database in a single transaction."""

import json
import sqlite3
from datetime import datetime, timezone

from .. import __version__
from ..analysis.engine import AnalysisResult


def save_run(conn: sqlite3.Connection, result: AnalysisResult, project_name: str) -> int:
    """Persist one run: store contents, sample statistics and findings.

    All inserts happen inside a single transaction so the database stays
    consistent even if the process is interrupted.

    Parameters
    ----------
    conn:
        An open ``sqlite3.Connection`` (from ``ResultsDB.connect()``).
    result:
        The finished ``AnalysisResult``.
    project_name:
        Label shown in the run history.

    Returns
    -------
    int
        The ``run_id`` of the newly inserted row.
    """
    cur = conn.cursor()
    try:
        cur.execute("BEGIN")

        # ── runs row ─────────────────────────────────────────────
        cur.execute(
            """
            INSERT INTO runs (tool_version, timestamp, project_name, project_paths, entity_count)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                __version__,
                datetime.now(timezone.utc).isoformat(),
                project_name,
                json.dumps(result.project_paths),
                result.entity_count,
            ),
        )
        run_id = cur.lastrowid
        assert run_id is not None

        # ── store_entries (batch) ────────────────────────────────
        entry_rows = []
        for namespace, content in result.store.dump().items():
            kind = content["kind"]
            for key, value in content["entries"].items():
                entry_rows.append((run_id, namespace, kind, key, json.dumps(value)))
        if entry_rows:
            cur.executemany(
                """
                INSERT INTO store_entries (run_id, namespace, kind, entity_key, value)
                VALUES (?, ?, ?, ?, ?)
                """,
                entry_rows,
            )

        # ── metric_stats / metric_samples (batch) ────────────────
        stat_rows = []
        sample_rows = []
        for samples in result.samples:
            metric = str(samples.metric)
            stats = samples.stats
            percentiles = {
                str(p): samples.percentile_value(p) for p in sorted(samples.requested_percentiles)
            }
            stat_rows.append(
                (
                    run_id,
                    metric,
                    samples.kind,
                    len(samples),
                    *(
                        (
                            stats.minimum,
                            stats.maximum,
                            stats.mean,
                            stats.q1,
                            stats.median,
                            stats.q3,
                            stats.iqr,
                            stats.mild_lower,
                            stats.mild_upper,
                            stats.extreme_lower,
                            stats.extreme_upper,
                        )
                        if stats is not None
                        else (None,) * 11
                    ),
                    json.dumps(percentiles),
                )
            )
            sample_rows.extend(
                (run_id, metric, position, float(value))
                for position, value in enumerate(samples.values)
            )
        if stat_rows:
            cur.executemany(
                """
                INSERT INTO metric_stats (
                    run_id, metric, kind, sample_count, minimum, maximum, mean,
                    q1, median, q3, iqr, mild_lower, mild_upper,
                    extreme_lower, extreme_upper, percentiles
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                stat_rows,
            )
        if sample_rows:
            cur.executemany(
                "INSERT INTO metric_samples (run_id, metric, position, value) VALUES (?, ?, ?, ?)",
                sample_rows,
            )

        # ── findings (batch) ─────────────────────────────────────
        finding_rows = [
            (run_id, f.entity_path, f.defect_name, f.project_path) for f in result.findings
        ]
        if finding_rows:
            cur.executemany(
                """
                INSERT INTO findings (run_id, entity_path, defect_name, project_path)
                VALUES (?, ?, ?, ?)
                """,
                finding_rows,
            )

        conn.commit()
        return run_id

    except Exception:
        conn.rollback()
        raise
