"""R1CS container error taxonomy.

Every error is fatal to the load or save that raised it. Each class carries a
stable ``code`` so reports can be produced without parsing messages.
"""
from __future__ import annotations


class R1csFormatError(ValueError):
    """Malformed container or a value that cannot be represented."""

    code = "E_FORMAT"


class BadMagicError(R1csFormatError):
    code = "E_BAD_MAGIC"


class UnsupportedVersionError(R1csFormatError):
    code = "E_UNSUPPORTED_VERSION"


class MissingSectionError(R1csFormatError):
    code = "E_MISSING_SECTION"


class DuplicateSectionError(R1csFormatError):
    code = "E_DUPLICATE_SECTION"


class SizeMismatchError(R1csFormatError):
    """Consumed bytes do not match a declared length."""

    code = "E_SIZE_MISMATCH"


class InvalidMapSizeError(SizeMismatchError):
    code = "E_INVALID_MAP_SIZE"


class TruncatedFileError(SizeMismatchError):
    """A declared length runs past the end of the file."""

    code = "E_TRUNCATED"


class SectionCountError(R1csFormatError):
    code = "E_SECTION_COUNT"


class FieldOverflowError(R1csFormatError):
    code = "E_FIELD_OVERFLOW"


class DuplicateIndexError(R1csFormatError):
    code = "E_DUPLICATE_INDEX"


class FieldRangeError(R1csFormatError):
    """A coefficient is not reduced modulo the prime."""

    code = "E_FIELD_RANGE"


class SectionStateError(RuntimeError):
    """The framing state machine was driven out of order."""

    code = "E_SECTION_STATE"


class AlreadyOpenError(SectionStateError):
    code = "E_ALREADY_OPEN"


class NotOpenError(SectionStateError):
    code = "E_NOT_OPEN"


class SectionStillOpenError(SectionStateError):
    code = "E_SECTION_STILL_OPEN"


class ClosedFileError(SectionStateError):
    code = "E_CLOSED"
