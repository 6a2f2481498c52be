"""
Report Writer

Dumps a drained sample registry to a uniquely named text file at the end
of a run:

    ---inserts---
    <start>, <duration>
    ...
    -------------
    ...
    --------->>>><redos><<<<---------

Only non-empty buckets get a section. The file name is the configured
prefix plus a random integer plus `.txt`; names that already exist are
skipped. Writing is best effort: failures are logged and the run's data is
dropped.

When Parquet output is enabled the same samples are also written, one row
per sample, to a `.parquet` file with the same stem; a stem is only used
when neither file exists yet.
"""

from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import IO, Optional

import pyarrow as pa
import pyarrow.parquet as pq

from lakebench.core.sample_registry import RegistrySnapshot
from lakebench.models import REPORT_ORDER

logger = logging.getLogger(__name__)

SECTION_END = "-------------\n"

SAMPLE_SCHEMA = pa.schema(
    [
        ("kind", pa.string()),
        ("outcome", pa.string()),
        ("start_ns", pa.int64()),
        ("duration_ns", pa.int64()),
    ]
)


def format_footer(redos: int) -> str:
    return f"--------->>>>{redos}<<<<---------"


class ReportWriter:
    """Writes the end-of-run latency report."""

    def __init__(
        self,
        prefix: str,
        *,
        parquet: bool = False,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.prefix = prefix
        self.parquet = parquet
        self._rng = rng or random.Random()

    def _candidate(self) -> Path:
        return Path(f"{self.prefix}{self._rng.randint(-(2**31), 2**31 - 1)}.txt")

    def _open_new_files(self) -> tuple[Path, IO[str], Optional[IO[bytes]]]:
        """
        Create the report (and sidecar, if enabled) under a stem whose files
        did not exist before, trying new names as needed.
        """
        while True:
            path = self._candidate()
            try:
                # "x" fails if the file exists, so a name is never reused.
                handle = open(path, "x", encoding="utf-8")
            except FileExistsError:
                logger.info("Report file %s already exists, picking another name", path)
                continue
            if not self.parquet:
                logger.info("Report file created: %s", path)
                return path, handle, None

            sidecar_path = path.with_suffix(".parquet")
            try:
                sidecar = open(sidecar_path, "xb")
            except OSError as e:
                # Only the report file just created here is removed.
                handle.close()
                path.unlink()
                if not isinstance(e, FileExistsError):
                    raise
                logger.info(
                    "Sample file %s already exists, picking another name", sidecar_path
                )
                continue
            logger.info("Report files created: %s, %s", path, sidecar_path)
            return path, handle, sidecar

    def render(self, snapshot: RegistrySnapshot) -> str:
        lines: list[str] = []
        for kind, outcome in REPORT_ORDER:
            samples = snapshot.bucket(kind, outcome)
            if not samples:
                continue
            lines.append(f"---{kind.section_label(outcome)}---\n")
            lines.extend(f"{s.start_ns}, {s.duration_ns}\n" for s in samples)
            lines.append(SECTION_END)
        lines.append(format_footer(snapshot.redos))
        return "".join(lines)

    def write(self, snapshot: RegistrySnapshot) -> Optional[Path]:
        """
        Write the report; returns its path, or None if it could not be written.
        """
        try:
            path, handle, sidecar = self._open_new_files()
        except OSError:
            logger.exception("Could not create report file with prefix %s", self.prefix)
            return None

        try:
            with handle:
                handle.write(self.render(snapshot))
        except OSError:
            logger.exception("Error while writing report %s", path)
            if sidecar is not None:
                sidecar.close()
                path.with_suffix(".parquet").unlink(missing_ok=True)
            return None

        if sidecar is not None:
            self._write_parquet(snapshot, sidecar, path.with_suffix(".parquet"))

        summary = snapshot.summarize()
        logger.info(
            "Report written to %s: %d attempts, %d redos, errors=%s",
            path,
            summary.total_attempts,
            summary.redos,
            summary.error_categories,
        )
        return path

    def _write_parquet(
        self, snapshot: RegistrySnapshot, sink: IO[bytes], path: Path
    ) -> None:
        rows = [
            {
                "kind": kind.value,
                "outcome": outcome.value,
                "start_ns": s.start_ns,
                "duration_ns": s.duration_ns,
            }
            for kind, outcome in REPORT_ORDER
            for s in snapshot.bucket(kind, outcome)
        ]
        try:
            with sink:
                table = pa.Table.from_pylist(rows, schema=SAMPLE_SCHEMA)
                pq.write_table(table, sink, compression="snappy")
        except OSError:
            logger.exception("Error while writing sample parquet %s", path)
            return
        logger.info("Wrote %d samples to %s", len(rows), path)
