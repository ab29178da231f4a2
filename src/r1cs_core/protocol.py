"""R1CS container protocol constants.

Single source of truth for on-disk magic values, section ids and record layouts.
Keep this file stable. Reader and writer must remain synchronized.
"""

# File magic
MAGIC_R1CS = b"r1cs"

VERSION = 1
MAX_SUPPORTED_VERSION = 1

# Preamble: [Magic(4) | Version(4) | NSections(4)] = 12 bytes
FILE_HEADER_FMT = "<4sII"
FILE_HEADER_LEN = 12

# Section table entry: [SectionId(4) | Length(8)] = 12 bytes
SECTION_HEADER_FMT = "<IQ"
SECTION_HEADER_LEN = 12
SECTION_SIZE_LEN = 8

# Section ids
SECTION_HEADER = 1
SECTION_CONSTRAINTS = 2
SECTION_MAP = 3
KNOWN_SECTIONS = frozenset({SECTION_HEADER, SECTION_CONSTRAINTS, SECTION_MAP})

# Fixed-width integer fields
U32_LEN = 4
U64_LEN = 8

# Header tail after the prime: nVars nOutputs nPubInputs nPrvInputs nLabels nConstraints
HEADER_TAIL_FMT = "<IIIIQI"
HEADER_TAIL_LEN = 28

# Large sequence policy
LARGE_SEQUENCE_THRESHOLD = 1 << 20
PAGE_SIZE = 1 << 16  # items per page
MAX_RESIDENT_PAGES = 8

# I/O sizing
CHANNEL_BUFFER_SIZE = 1 << 22  # 4 MiB

# Progress intervals
READ_PROGRESS_INTERVAL = 100_000
WRITE_PROGRESS_INTERVAL = 10_000
MAP_PROGRESS_INTERVAL = 10_000  # also the map read/write chunk
