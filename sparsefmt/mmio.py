"""Reading and writing Matrix Market files."""

from __future__ import annotations

import re
import sys
from contextlib import nullcontext
from dataclasses import dataclass
from typing import IO, Iterable, Optional

MM_MAX_LINE_LENGTH = 1025
MM_MAX_TOKEN_LENGTH = 64
MATRIX_MARKET_BANNER = "%%MatrixMarket"

MM_COULD_NOT_READ_FILE = 11
MM_PREMATURE_EOF = 12
MM_NOT_MTX = 13
MM_NO_HEADER = 14
MM_UNSUPPORTED_TYPE = 15
MM_LINE_TOO_LONG = 16
MM_COULD_NOT_WRITE_FILE = 17

MM_MTX_STR = "matrix"
MM_ARRAY_STR = "array"
MM_DENSE_STR = "array"
MM_COORDINATE_STR = "coordinate"
MM_SPARSE_STR = "coordinate"
MM_COMPLEX_STR = "complex"
MM_REAL_STR = "real"
MM_INT_STR = "integer"
MM_GENERAL_STR = "general"
MM_SYMM_STR = "symmetric"
MM_HERM_STR = "hermitian"
MM_SKEW_STR = "skew-symmetric"
MM_PATTERN_STR = "pattern"

_STORAGE_NAMES = {"C": MM_SPARSE_STR, "A": MM_DENSE_STR}
_FIELD_NAMES = {"R": MM_REAL_STR, "C": MM_COMPLEX_STR, "P": MM_PATTERN_STR, "I": MM_INT_STR}
_SYMMETRY_NAMES = {"G": MM_GENERAL_STR, "S": MM_SYMM_STR, "H": MM_HERM_STR, "K": MM_SKEW_STR}

_STORAGE_CODES = {name: code for code, name in _STORAGE_NAMES.items()}
_FIELD_CODES = {name: code for code, name in _FIELD_NAMES.items()}
_SYMMETRY_CODES = {name: code for code, name in _SYMMETRY_NAMES.items()}

_INT_RE = re.compile(r"\s*([+-]?\d+)")
_FLOAT_RE = re.compile(
    r"\s*([+-]?(?:\d+\.?\d*(?:[eE][+-]?\d+)?|\.\d+(?:[eE][+-]?\d+)?|inf(?:inity)?|nan))",
    re.IGNORECASE,
)


class MatrixMarketError(Exception):
    """Raised when a Matrix Market file cannot be read or written."""

    def __init__(self, message: str, code: int):
        super().__init__(message)
        self.code = code


@dataclass(frozen=True)
class MMTypecode:
    """The four-letter Matrix Market type: object, storage, field, symmetry."""

    obj: str = " "
    storage: str = " "
    field: str = " "
    symmetry: str = "G"

    @property
    def is_matrix(self) -> bool:
        return self.obj == "M"

    @property
    def is_sparse(self) -> bool:
        return self.storage == "C"

    @property
    def is_coordinate(self) -> bool:
        return self.storage == "C"

    @property
    def is_dense(self) -> bool:
        return self.storage == "A"

    @property
    def is_array(self) -> bool:
        return self.storage == "A"

    @property
    def is_complex(self) -> bool:
        return self.field == "C"

    @property
    def is_real(self) -> bool:
        return self.field == "R"

    @property
    def is_pattern(self) -> bool:
        return self.field == "P"

    @property
    def is_integer(self) -> bool:
        return self.field == "I"

    @property
    def is_symmetric(self) -> bool:
        return self.symmetry == "S"

    @property
    def is_general(self) -> bool:
        return self.symmetry == "G"

    @property
    def is_skew(self) -> bool:
        return self.symmetry == "K"

    @property
    def is_hermitian(self) -> bool:
        return self.symmetry == "H"

    def is_valid(self) -> bool:
        """Whether the combination of type letters is allowed."""
        if not self.is_matrix:
            return False
        if self.is_dense and self.is_pattern:
            return False
        if self.is_real and self.is_hermitian:
            return False
        if self.is_pattern and (self.is_hermitian or self.is_skew):
            return False
        return True

    def to_str(self) -> Optional[str]:
        """The banner words for this type, or None if a letter is unknown."""
        if not self.is_matrix:
            return None
        storage = _STORAGE_NAMES.get(self.storage)
        field = _FIELD_NAMES.get(self.field)
        symmetry = _SYMMETRY_NAMES.get(self.symmetry)
        if storage is None or field is None or symmetry is None:
            return None
        return f"{MM_MTX_STR} {storage} {field} {symmetry}"


def _scan(text: str, spec: str) -> list:
    """Parse leading fields of ``text`` like scanf: 'd' for int, 'g' for float."""
    values = []
    pos = 0
    for kind in spec:
        match = (_INT_RE if kind == "d" else _FLOAT_RE).match(text, pos)
        if match is None:
            break
        token = match.group(1)
        values.append(int(token) if kind == "d" else float(token))
        pos = match.end()
    return values


def _premature_eof() -> MatrixMarketError:
    return MatrixMarketError("premature end of file", MM_PREMATURE_EOF)


def _unsupported(what: str) -> MatrixMarketError:
    return MatrixMarketError(f"unsupported Matrix Market type: {what}", MM_UNSUPPORTED_TYPE)


def read_banner(f: IO[str]) -> MMTypecode:
    """Read the banner line and return its type code."""
    line = f.readline()
    if not line:
        raise _premature_eof()
    tokens = line.split()
    if len(tokens) < 5:
        raise _premature_eof()
    banner, mtx, crd, data_type, storage_scheme = tokens[0], *(t.lower() for t in tokens[1:5])

    if not banner.startswith(MATRIX_MARKET_BANNER):
        raise MatrixMarketError("missing Matrix Market header", MM_NO_HEADER)
    if mtx != MM_MTX_STR:
        raise _unsupported(mtx)
    storage = _STORAGE_CODES.get(crd)
    if storage is None:
        raise _unsupported(crd)
    field = _FIELD_CODES.get(data_type)
    if field is None:
        raise _unsupported(data_type)
    symmetry = _SYMMETRY_CODES.get(storage_scheme)
    if symmetry is None:
        raise _unsupported(storage_scheme)
    return MMTypecode("M", storage, field, symmetry)


def _read_size(f: IO[str], count: int) -> tuple:
    while True:
        line = f.readline()
        if not line:
            raise _premature_eof()
        if not line.startswith("%"):
            break
    spec = "d" * count
    values = _scan(line, spec)
    while len(values) != count:
        line = f.readline()
        if not line:
            raise _premature_eof()
        values = _scan(line, spec)
    return tuple(values)


def read_crd_size(f: IO[str]) -> tuple[int, int, int]:
    """Skip comments and read the rows, columns and entry count of a coordinate file."""
    return _read_size(f, 3)


def read_array_size(f: IO[str]) -> tuple[int, int]:
    """Skip comments and read the rows and columns of an array file."""
    return _read_size(f, 2)


def write_banner(f: IO[str], typecode: MMTypecode) -> None:
    """Write the banner line for ``typecode``."""
    text = typecode.to_str()
    if text is None:
        raise _unsupported(repr(typecode))
    f.write(f"{MATRIX_MARKET_BANNER} {text}\n")


def write_crd_size(f: IO[str], m: int, n: int, nz: int) -> None:
    """Write the size line of a coordinate file."""
    f.write(f"{m} {n} {nz}\n")


def write_array_size(f: IO[str], m: int, n: int) -> None:
    """Write the size line of an array file."""
    f.write(f"{m} {n}\n")


def _entry_spec(typecode: MMTypecode) -> str:
    if typecode.is_complex:
        return "ddgg"
    if typecode.is_real:
        return "ddg"
    if typecode.is_pattern:
        return "dd"
    raise _unsupported(repr(typecode))


def read_crd_entry(f: IO[str], typecode: MMTypecode) -> tuple:
    """Read one coordinate entry as (row, col, value); value is None for patterns."""
    spec = _entry_spec(typecode)
    while True:
        line = f.readline()
        if not line:
            raise _premature_eof()
        if line.strip():
            break
    values = _scan(line, spec)
    if len(values) != len(spec):
        raise _premature_eof()
    row, col = values[0], values[1]
    if typecode.is_complex:
        return row, col, complex(values[2], values[3])
    if typecode.is_real:
        return row, col, values[2]
    return row, col, None


def read_crd_data(f: IO[str], nz: int, typecode: MMTypecode) -> tuple:
    """Read ``nz`` entries; returns (rows, cols, values), values None for patterns."""
    _entry_spec(typecode)
    rows: list[int] = []
    cols: list[int] = []
    values: list = []
    for _ in range(nz):
        row, col, value = read_crd_entry(f, typecode)
        rows.append(row)
        cols.append(col)
        values.append(value)
    return rows, cols, (None if typecode.is_pattern else values)


def _open(path: str, mode: str, error_code: int):
    try:
        return open(path, mode, encoding="utf-8")
    except OSError as exc:
        raise MatrixMarketError(f"cannot open {path}: {exc}", error_code) from exc


def read_mtx_crd(path: str) -> tuple:
    """Read a sparse file; returns (m, n, rows, cols, values, typecode)."""
    if path == "stdin":
        handle = nullcontext(sys.stdin)
    else:
        handle = _open(path, "r", MM_COULD_NOT_READ_FILE)
    with handle as f:
        typecode = read_banner(f)
        if not (typecode.is_valid() and typecode.is_sparse and typecode.is_matrix):
            raise _unsupported(typecode.to_str() or repr(typecode))
        m, n, nz = read_crd_size(f)
        rows, cols, values = read_crd_data(f, nz, typecode)
    return m, n, rows, cols, values, typecode


def write_mtx_crd(
    path: str,
    m: int,
    n: int,
    rows: Iterable[int],
    cols: Iterable[int],
    values,
    typecode: MMTypecode,
) -> None:
    """Write a sparse file; ``path`` 'stdout' writes to standard output."""
    rows = list(rows)
    cols = list(cols)
    if path == "stdout":
        handle = nullcontext(sys.stdout)
    else:
        handle = _open(path, "w", MM_COULD_NOT_WRITE_FILE)
    with handle as f:
        f.write(f"{MATRIX_MARKET_BANNER} {typecode.to_str()}\n")
        f.write(f"{m} {n} {len(rows)}\n")
        if typecode.is_pattern:
            for row, col in zip(rows, cols, strict=True):
                f.write(f"{row} {col}\n")
        elif typecode.is_real:
            for row, col, value in zip(rows, cols, values, strict=True):
                f.write("%d %d %20.16g\n" % (row, col, value))
        elif typecode.is_complex:
            for row, col, value in zip(rows, cols, values, strict=True):
                value = complex(value)
                f.write("%d %d %20.16g %20.16g\n" % (row, col, value.real, value.imag))
        else:
            raise _unsupported(repr(typecode))


def read_unsymmetric_sparse(path: str) -> tuple:
    """Read a real sparse file; returns (m, n, rows, cols, values) with 0-based indices."""
    with _open(path, "r", MM_COULD_NOT_READ_FILE) as f:
        typecode = read_banner(f)
        if not (typecode.is_real and typecode.is_matrix and typecode.is_sparse):
            raise _unsupported(typecode.to_str() or repr(typecode))
        m, n, nz = read_crd_size(f)
        rows, cols, values = read_crd_data(f, nz, typecode)
    return m, n, [r - 1 for r in rows], [c - 1 for c in cols], values