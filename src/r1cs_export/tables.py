from __future__ import annotations

import json
from pathlib import Path

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

from r1cs_core import read_r1cs
from r1cs_verify.digest import file_sha256

DEFAULT_BATCH_ROWS = 1 << 16

CONSTRAINTS_FILE = "tables/constraints.parquet"
MAP_FILE = "tables/map.parquet"

CONSTRAINT_SCHEMA = pa.schema(
    [
        ("constraint_id", pa.int64()),
        ("matrix", pa.string()),
        ("wire", pa.int64()),
        # Field elements exceed 64 bits; keep them as decimal strings.
        ("coeff", pa.string()),
    ]
)

MAP_SCHEMA = pa.schema(
    [
        ("wire", pa.int64()),
        ("label", pa.uint64()),
    ]
)


class BatchedTable:
    """Buffers rows and streams them into one parquet file in fixed-size batches."""

    def __init__(self, path: Path, schema: pa.Schema, batch_rows: int):
        if batch_rows < 1:
            raise ValueError("batch_rows must be positive")
        self.schema = schema
        self.batch_rows = batch_rows
        self.rows: list[tuple] = []
        self.count = 0
        self.writer = pq.ParquetWriter(str(path), schema)

    def add(self, row: tuple) -> None:
        self.rows.append(row)
        if len(self.rows) >= self.batch_rows:
            self.flush()

    def flush(self) -> None:
        if not self.rows:
            return
        df = pd.DataFrame(self.rows, columns=self.schema.names)
        self.writer.write_table(pa.Table.from_pandas(df, schema=self.schema, preserve_index=False))
        self.count += len(self.rows)
        self.rows = []

    def close(self) -> None:
        self.flush()
        self.writer.close()


def _write_constraints(r1cs, out_path: Path, batch_rows: int) -> int:
    table = BatchedTable(out_path / CONSTRAINTS_FILE, CONSTRAINT_SCHEMA, batch_rows)
    try:
        for cid, constraint in enumerate(r1cs.constraints):
            for matrix, lc in zip("ABC", constraint):
                for wire in sorted(lc):
                    table.add((cid, matrix, wire, str(lc[wire])))
    finally:
        table.close()
    return table.count


def _write_map(r1cs, out_path: Path, batch_rows: int) -> int:
    table = BatchedTable(out_path / MAP_FILE, MAP_SCHEMA, batch_rows)
    try:
        for wire, label in enumerate(r1cs.map):
            table.add((wire, label))
    finally:
        table.close()
    return table.count


def export_r1cs(source: Path, out_path: Path, batch_rows: int = DEFAULT_BATCH_ROWS) -> dict:
    """Export an R1CS container to parquet tables plus a manifest."""
    source = Path(source)
    out_path = Path(out_path)
    (out_path / "tables").mkdir(parents=True, exist_ok=True)

    r1cs = read_r1cs(source)
    try:
        n_terms = _write_constraints(r1cs, out_path, batch_rows)
        n_map = _write_map(r1cs, out_path, batch_rows)
    finally:
        r1cs.close()

    h = r1cs.header
    files_rel = sorted([CONSTRAINTS_FILE, MAP_FILE])
    manifest = {
        "spec": "r1cs-export-v1",
        "source": {"name": source.name, "sha256": file_sha256(source)},
        "header": {
            "n8": h.n8,
            "prime": str(h.prime),
            "n_vars": h.n_vars,
            "n_outputs": h.n_outputs,
            "n_pub_inputs": h.n_pub_inputs,
            "n_prv_inputs": h.n_prv_inputs,
            "n_labels": h.n_labels,
            "n_constraints": h.n_constraints,
        },
        "rows": {CONSTRAINTS_FILE: n_terms, MAP_FILE: n_map},
        "files": {rel: file_sha256(out_path / rel) for rel in files_rel},
    }

    man_bytes = json.dumps(
        manifest, sort_keys=True, separators=(",", ":"), ensure_ascii=False
    ).encode("utf-8")
    (out_path / "manifest.json").write_bytes(man_bytes)
    return manifest
