"""R1CS domain codec: header, constraints and variable map sections.

A linear combination is a plain ``dict`` mapping wire index to a nonzero
coefficient. Writers emit terms in ascending wire index and drop zero
coefficients, so a given logical circuit always produces the same bytes.
Readers accept terms in any order but reject a repeated wire index.
"""
from __future__ import annotations

import logging
import struct
from dataclasses import dataclass, replace
from itertools import islice
from pathlib import Path
from typing import Callable, Dict, Iterable, NamedTuple, Optional, Sequence

from .bigarray import new_sequence
from .binfile import BinFile, create_bin_file, open_bin_file
from .errors import DuplicateIndexError, FieldRangeError, InvalidMapSizeError
from .field import decode_uint, encode_uint, field_width
from .protocol import (
    HEADER_TAIL_FMT,
    HEADER_TAIL_LEN,
    LARGE_SEQUENCE_THRESHOLD,
    MAGIC_R1CS,
    MAP_PROGRESS_INTERVAL,
    MAX_SUPPORTED_VERSION,
    PAGE_SIZE,
    READ_PROGRESS_INTERVAL,
    SECTION_CONSTRAINTS,
    SECTION_HEADER,
    SECTION_MAP,
    U32_LEN,
    U64_LEN,
    VERSION,
    WRITE_PROGRESS_INTERVAL,
)

log = logging.getLogger(__name__)

LinearCombination = Dict[int, int]
ProgressFn = Callable[[str, int, int], None]


class Constraint(NamedTuple):
    """``a·x ∘ b·x = c·x``"""

    a: LinearCombination
    b: LinearCombination
    c: LinearCombination


@dataclass
class R1csHeader:
    n8: int
    prime: int
    n_vars: int
    n_outputs: int
    n_pub_inputs: int
    n_prv_inputs: int
    n_labels: int
    n_constraints: int


@dataclass
class R1cs:
    header: R1csHeader
    constraints: Optional[Sequence[Constraint]] = None
    map: Optional[Sequence[int]] = None

    @classmethod
    def build(
        cls,
        prime: int,
        n_vars: int,
        n_outputs: int,
        n_pub_inputs: int,
        n_prv_inputs: int,
        n_labels: int,
        constraints: Sequence[Constraint],
        map: Sequence[int] | None = None,
        n8: int | None = None,
    ) -> "R1cs":
        header = R1csHeader(
            n8=field_width(prime) if n8 is None else n8,
            prime=prime,
            n_vars=n_vars,
            n_outputs=n_outputs,
            n_pub_inputs=n_pub_inputs,
            n_prv_inputs=n_prv_inputs,
            n_labels=n_labels,
            n_constraints=len(constraints),
        )
        return cls(header, constraints, map)

    def close(self) -> None:
        """Release any paged storage behind the loaded sections."""
        for seq in (self.constraints, self.map):
            close = getattr(seq, "close", None)
            if close is not None:
                close()


def _report(progress: ProgressFn | None, stage: str, done: int, total: int) -> None:
    log.info("%s: %d/%d", stage, done, total)
    if progress is not None:
        progress(stage, done, total)


# -- header ----------------------------------------------------------------


def read_r1cs_header(bin_file: BinFile) -> R1csHeader:
    bin_file.start_read_unique_section(SECTION_HEADER)
    ch = bin_file.channel
    n8 = ch.read_u32()
    prime = decode_uint(bin_file.read_bounded(n8), n8)
    n_vars, n_outputs, n_pub, n_prv, n_labels, n_constraints = struct.unpack(
        HEADER_TAIL_FMT, ch.read(HEADER_TAIL_LEN)
    )
    bin_file.end_read_section()
    return R1csHeader(n8, prime, n_vars, n_outputs, n_pub, n_prv, n_labels, n_constraints)


def write_r1cs_header(bin_file: BinFile, header: R1csHeader) -> None:
    bin_file.start_write_section(SECTION_HEADER)
    ch = bin_file.channel
    ch.write_u32(header.n8)
    ch.write_uint(header.prime, header.n8)
    ch.write_u32(header.n_vars)
    ch.write_u32(header.n_outputs)
    ch.write_u32(header.n_pub_inputs)
    ch.write_u32(header.n_prv_inputs)
    ch.write_u64(header.n_labels)
    ch.write_u32(header.n_constraints)
    bin_file.end_write_section()


# -- constraints -----------------------------------------------------------


def _read_lc(bin_file: BinFile, n8: int, prime: int | None) -> LinearCombination:
    ch = bin_file.channel
    count = ch.read_u32()
    stride = U32_LEN + n8
    buf = bin_file.read_bounded(count * stride)
    lc: LinearCombination = {}
    for o in range(0, len(buf), stride):
        idx = int.from_bytes(buf[o:o + U32_LEN], "little")
        if idx in lc:
            raise DuplicateIndexError(
                f"{bin_file.name}: Wire {idx} repeated in one linear combination"
            )
        coeff = int.from_bytes(buf[o + U32_LEN:o + stride], "little")
        if prime is not None and coeff >= prime:
            raise FieldRangeError(f"{bin_file.name}: Coefficient of wire {idx} is not below the prime")
        lc[idx] = coeff
    return lc


def read_r1cs_constraints(
    bin_file: BinFile,
    header: R1csHeader,
    threshold: int = LARGE_SEQUENCE_THRESHOLD,
    progress: ProgressFn | None = None,
    check_field: bool = False,
    page_size: int = PAGE_SIZE,
):
    bin_file.start_read_unique_section(SECTION_CONSTRAINTS)
    n8 = header.n8
    prime = header.prime if check_field else None
    total = header.n_constraints
    constraints = new_sequence(total, threshold, page_size)
    try:
        for i in range(total):
            if i % READ_PROGRESS_INTERVAL == 0:
                _report(progress, "Loading constraints", i, total)
            constraints.append(Constraint(
                _read_lc(bin_file, n8, prime),
                _read_lc(bin_file, n8, prime),
                _read_lc(bin_file, n8, prime),
            ))
        bin_file.end_read_section()
    except BaseException:
        constraints.close()
        raise
    return constraints


def encode_lc(lc: LinearCombination, n8: int) -> bytes:
    terms = sorted((idx, coeff) for idx, coeff in lc.items() if coeff != 0)
    parts = [encode_uint(len(terms), U32_LEN)]
    for idx, coeff in terms:
        parts.append(encode_uint(idx, U32_LEN))
        parts.append(encode_uint(coeff, n8))
    return b"".join(parts)


def encode_constraint(constraint: Sequence[LinearCombination], n8: int) -> bytes:
    a, b, c = constraint
    return encode_lc(a, n8) + encode_lc(b, n8) + encode_lc(c, n8)


def write_r1cs_constraints(
    bin_file: BinFile,
    constraints: Iterable[Constraint],
    n8: int,
    total: int,
    progress: ProgressFn | None = None,
) -> None:
    bin_file.start_write_section(SECTION_CONSTRAINTS)
    for i, constraint in enumerate(constraints):
        if i % WRITE_PROGRESS_INTERVAL == 0:
            _report(progress, "Writing constraints", i, total)
        bin_file.channel.write(encode_constraint(constraint, n8))
    bin_file.end_write_section()


# -- variable map ----------------------------------------------------------


def read_r1cs_map(
    bin_file: BinFile,
    header: R1csHeader,
    threshold: int = LARGE_SEQUENCE_THRESHOLD,
    progress: ProgressFn | None = None,
    page_size: int = PAGE_SIZE,
):
    entry = bin_file.start_read_unique_section(SECTION_MAP)
    total = header.n_vars
    if entry.size != total * U64_LEN:
        raise InvalidMapSizeError(
            f"{bin_file.name}: Invalid map size {entry.size} bytes for {total} wires"
        )
    wire_map = new_sequence(total, threshold, page_size)
    try:
        done = 0
        while done < total:
            _report(progress, "Loading map", done, total)
            k = min(MAP_PROGRESS_INTERVAL, total - done)
            wire_map.extend(struct.unpack(f"<{k}Q", bin_file.channel.read(k * U64_LEN)))
            done += k
        bin_file.end_read_section()
    except BaseException:
        wire_map.close()
        raise
    return wire_map


def write_r1cs_map(
    bin_file: BinFile,
    wire_map: Sequence[int],
    n_vars: int,
    progress: ProgressFn | None = None,
) -> None:
    if len(wire_map) != n_vars:
        raise InvalidMapSizeError(f"Invalid map size {len(wire_map)}, expected {n_vars}")
    bin_file.start_write_section(SECTION_MAP)
    labels = iter(wire_map)
    done = 0
    while done < n_vars:
        _report(progress, "Writing map", done, n_vars)
        chunk = list(islice(labels, MAP_PROGRESS_INTERVAL))
        bin_file.channel.write(b"".join(encode_uint(label, U64_LEN) for label in chunk))
        done += len(chunk)
    bin_file.end_write_section()


# -- files -----------------------------------------------------------------


def read_r1cs(
    path: Path,
    load_constraints: bool = True,
    load_map: bool = True,
    *,
    threshold: int = LARGE_SEQUENCE_THRESHOLD,
    page_size: int = PAGE_SIZE,
    progress: ProgressFn | None = None,
    check_field: bool = False,
    max_version: int = MAX_SUPPORTED_VERSION,
) -> R1cs:
    """Load an R1CS container, validating each section as it is read."""
    with open_bin_file(Path(path), MAGIC_R1CS, max_version) as bin_file:
        header = read_r1cs_header(bin_file)
        r1cs = R1cs(header)
        try:
            if load_constraints:
                r1cs.constraints = read_r1cs_constraints(
                    bin_file, header, threshold, progress, check_field, page_size
                )
            if load_map:
                r1cs.map = read_r1cs_map(bin_file, header, threshold, progress, page_size)
        except BaseException:
            r1cs.close()
            raise
    return r1cs


def write_r1cs(path: Path, r1cs: R1cs, *, progress: ProgressFn | None = None) -> None:
    """Write header, constraints and (when present) map; remove the file on failure."""
    path = Path(path)
    constraints = r1cs.constraints if r1cs.constraints is not None else []
    header = replace(r1cs.header, n_constraints=len(constraints))
    if r1cs.map is not None and len(r1cs.map) != header.n_vars:
        raise InvalidMapSizeError(f"Invalid map size {len(r1cs.map)}, expected {header.n_vars}")

    n_sections = 3 if r1cs.map is not None else 2
    try:
        with create_bin_file(path, MAGIC_R1CS, VERSION, n_sections) as bin_file:
            write_r1cs_header(bin_file, header)
            write_r1cs_constraints(bin_file, constraints, header.n8, header.n_constraints, progress)
            if r1cs.map is not None:
                write_r1cs_map(bin_file, r1cs.map, header.n_vars, progress)
    except BaseException:
        path.unlink(missing_ok=True)
        raise
