from pathlib import Path
from r1cs_core import read_r1cs
from r1cs_core.errors import R1csFormatError
from .const import ERRORS
from .digest import file_sha256

def _fail(code: str, detail: str) -> dict:
    errors = [{"code": code, "message": ERRORS.get(code, ERRORS["E_FORMAT"]), "detail": detail}]
    return {"status": "FAIL", "error_count": len(errors), "errors": errors}

def verify_r1cs(path: Path, check_field: bool = True) -> dict:
    path = Path(path)
    try:
        r1cs = read_r1cs(path, check_field=check_field)
    except R1csFormatError as e:
        return _fail(e.code, str(e))
    except OSError as e:
        return _fail("E_IO", str(e))

    try:
        h = r1cs.header
        n_terms = 0
        for a, b, c in r1cs.constraints:
            n_terms += len(a) + len(b) + len(c)
    finally:
        r1cs.close()

    summary = {
        "n8": h.n8,
        "prime": str(h.prime),
        "n_vars": h.n_vars,
        "n_outputs": h.n_outputs,
        "n_pub_inputs": h.n_pub_inputs,
        "n_prv_inputs": h.n_prv_inputs,
        "n_labels": h.n_labels,
        "n_constraints": h.n_constraints,
        "n_terms": n_terms,
        "sha256": file_sha256(path),
    }
    return {"status": "PASS", "error_count": 0, "errors": [], "summary": summary}
