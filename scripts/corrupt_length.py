import struct
import sys
from pathlib import Path

def main():
    if len(sys.argv) != 3:
        print("Usage: corrupt_length.py <file> <section_id>")
        raise SystemExit(2)

    p = Path(sys.argv[1])
    target = int(sys.argv[2])
    b = bytearray(p.read_bytes())
    if len(b) < 12:
        print("File too small to corrupt safely.")
        raise SystemExit(2)

    # Walk the section table: preamble is 12 bytes, each entry header is
    # 4 bytes id + 8 bytes length. Bump the first matching length by one.
    n_sections = struct.unpack_from("<I", b, 8)[0]
    pos = 12
    for _ in range(n_sections):
        sid, size = struct.unpack_from("<IQ", b, pos)
        if sid == target:
            struct.pack_into("<Q", b, pos + 4, size + 1)
            p.write_bytes(bytes(b))
            print(f"Corrupted length of section {sid} at offset {pos + 4} in {p}")
            return
        pos += 12 + size

    print(f"Section {target} not found in {p}")
    raise SystemExit(2)

if __name__ == "__main__":
    main()
