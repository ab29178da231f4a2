ERRORS = {
  "E_IO": "File could not be read",
  "E_BAD_MAGIC": "File is not an r1cs container",
  "E_UNSUPPORTED_VERSION": "Container version not supported",
  "E_MISSING_SECTION": "Required section missing",
  "E_DUPLICATE_SECTION": "Unique section appears more than once",
  "E_SIZE_MISMATCH": "Section bytes consumed do not match declared length",
  "E_TRUNCATED": "Declared length runs past end of file",
  "E_INVALID_MAP_SIZE": "Variable map length does not match nVars",
  "E_SECTION_COUNT": "Section count does not match sections written",
  "E_FIELD_OVERFLOW": "Value does not fit its fixed width",
  "E_DUPLICATE_INDEX": "Wire index repeated in a linear combination",
  "E_FIELD_RANGE": "Coefficient not reduced modulo the prime",
  "E_FORMAT": "Malformed container",
}
