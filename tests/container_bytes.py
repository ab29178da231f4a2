"""Hand-assembled container bytes, independent of the writer under test."""
from __future__ import annotations

import struct

BN128_PRIME = 21888242871839275222246405745257275088548364400416034343698204186575808495617

FIXTURE_HEADER = {
    "n8": 32,
    "prime": BN128_PRIME,
    "n_vars": 7,
    "n_outputs": 1,
    "n_pub_inputs": 2,
    "n_prv_inputs": 3,
    "n_labels": 1000,
    "n_constraints": 3,
}

FIXTURE_CONSTRAINTS = [
    ({5: 3, 6: 8}, {0: 2, 2: 20, 3: 12}, {0: 5, 2: 7}),
    ({1: 4, 4: 8, 5: 3}, {3: 44, 6: 6}, {}),
    ({6: 4}, {0: 6, 2: 11, 3: 5}, {6: 600}),
]

FIXTURE_MAP = [0, 3, 10, 11, 12, 15, 324]


def section(sid: int, payload: bytes, size: int | None = None) -> bytes:
    return struct.pack("<IQ", sid, len(payload) if size is None else size) + payload


def container(sections: list[bytes], version: int = 1, magic: bytes = b"r1cs") -> bytes:
    return magic + struct.pack("<II", version, len(sections)) + b"".join(sections)


def header_payload(n8, prime, n_vars, n_outputs, n_pub_inputs, n_prv_inputs, n_labels, n_constraints) -> bytes:
    return (
        struct.pack("<I", n8)
        + prime.to_bytes(n8, "little")
        + struct.pack("<IIIIQI", n_vars, n_outputs, n_pub_inputs, n_prv_inputs, n_labels, n_constraints)
    )


def lc_payload(terms: list[tuple[int, int]], n8: int = 32) -> bytes:
    """Terms are written in the given order, duplicates included."""
    out = struct.pack("<I", len(terms))
    for idx, coeff in terms:
        out += struct.pack("<I", idx) + coeff.to_bytes(n8, "little")
    return out


def constraints_payload(constraints, n8: int = 32) -> bytes:
    return b"".join(lc_payload(list(lc.items()), n8) for c in constraints for lc in c)


def map_payload(labels: list[int]) -> bytes:
    return struct.pack(f"<{len(labels)}Q", *labels)


def fixture_sections() -> list[bytes]:
    return [
        section(1, header_payload(**FIXTURE_HEADER)),
        section(2, constraints_payload(FIXTURE_CONSTRAINTS)),
        section(3, map_payload(FIXTURE_MAP)),
    ]
