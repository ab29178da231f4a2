"""R1CS Core - Section-framed container and constraint system codec."""
from .binfile import BinFile, FileState, SectionDirectory, SectionEntry, create_bin_file, open_bin_file
from .bigarray import MemorySequence, PagedSequence, new_sequence
from .field import decode_uint, encode_uint, field_width
from .r1cs import (
    Constraint,
    R1cs,
    R1csHeader,
    read_r1cs,
    read_r1cs_constraints,
    read_r1cs_header,
    read_r1cs_map,
    write_r1cs,
    write_r1cs_constraints,
    write_r1cs_header,
    write_r1cs_map,
)

__all__ = [
    "BinFile",
    "FileState",
    "SectionDirectory",
    "SectionEntry",
    "create_bin_file",
    "open_bin_file",
    "MemorySequence",
    "PagedSequence",
    "new_sequence",
    "decode_uint",
    "encode_uint",
    "field_width",
    "Constraint",
    "R1cs",
    "R1csHeader",
    "read_r1cs",
    "read_r1cs_constraints",
    "read_r1cs_header",
    "read_r1cs_map",
    "write_r1cs",
    "write_r1cs_constraints",
    "write_r1cs_header",
    "write_r1cs_map",
]
