import json
import struct

import pyarrow.parquet as pq
from click.testing import CliRunner

from r1cs_export.cli import main as export_main
from r1cs_verify.cli import main as verify_main
from r1cs_verify.logic import verify_r1cs

from container_bytes import BN128_PRIME, FIXTURE_MAP, container, fixture_sections, section


def test_verify_pass(example_file):
    result = CliRunner().invoke(verify_main, ["file", str(example_file)])
    assert result.exit_code == 0, result.output
    report = json.loads(result.output)
    assert report["status"] == "PASS"
    assert report["summary"]["n_constraints"] == 3
    assert report["summary"]["n_terms"] == 17
    assert report["summary"]["prime"] == str(BN128_PRIME)
    assert len(report["summary"]["sha256"]) == 64


def test_verify_fail_reports_code(tmp_path):
    p = tmp_path / "v2.r1cs"
    p.write_bytes(container(fixture_sections(), version=2))
    result = CliRunner().invoke(verify_main, ["file", str(p)])
    assert result.exit_code == 1
    report = json.loads(result.output)
    assert report["status"] == "FAIL"
    assert report["errors"][0]["code"] == "E_UNSUPPORTED_VERSION"


def test_verify_missing_section(tmp_path):
    hdr, cons, _ = fixture_sections()
    p = tmp_path / "nomap.r1cs"
    p.write_bytes(container([hdr, cons]))
    report = verify_r1cs(p)
    assert report["status"] == "FAIL"
    assert report["errors"][0]["code"] == "E_MISSING_SECTION"
    assert report["errors"][0]["message"] == "Required section missing"


def test_export_tables(example_file, tmp_path):
    out = tmp_path / "export"
    result = CliRunner().invoke(export_main, [str(example_file), str(out), "--batch-rows", "4"])
    assert result.exit_code == 0, result.output
    assert "PASS" in result.output

    cons = pq.read_table(out / "tables" / "constraints.parquet").to_pandas()
    assert len(cons) == 17
    first = cons[cons["constraint_id"] == 0]
    assert list(first["matrix"]) == ["A", "A", "B", "B", "B", "C", "C"]
    assert list(first["wire"]) == [5, 6, 0, 2, 3, 0, 2]
    assert list(first["coeff"]) == ["3", "8", "2", "20", "12", "5", "7"]

    wire_map = pq.read_table(out / "tables" / "map.parquet").to_pandas()
    assert list(wire_map["label"]) == FIXTURE_MAP

    manifest = json.loads((out / "manifest.json").read_text(encoding="utf-8"))
    assert manifest["header"]["n_vars"] == 7
    assert manifest["rows"] == {"tables/constraints.parquet": 17, "tables/map.parquet": 7}
    assert sorted(manifest["files"]) == ["tables/constraints.parquet", "tables/map.parquet"]


def test_export_fails_closed(tmp_path):
    p = tmp_path / "bad.r1cs"
    p.write_bytes(b"not an r1cs file")
    result = CliRunner().invoke(export_main, [str(p), str(tmp_path / "out")])
    assert result.exit_code == 1
    assert "FATAL:" in result.output


def test_verify_oversized_term_count(tmp_path):
    hdr, _, wire_map = fixture_sections()
    # Three constraints declared, the first term count runs far past the section.
    cons = section(2, struct.pack("<I", 0xFFFFFFFF) + b"\x00" * 36)
    p = tmp_path / "huge_count.r1cs"
    p.write_bytes(container([hdr, cons, wire_map]))
    report = verify_r1cs(p)
    assert report["status"] == "FAIL"
    assert report["errors"][0]["code"] in {"E_SIZE_MISMATCH", "E_TRUNCATED"}
