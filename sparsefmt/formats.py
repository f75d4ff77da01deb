"""Sparse matrix storage formats and their tuning parameters.

Index arrays follow the Fortran convention: row and column numbers and
offsets into value arrays are 1-based.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields


@dataclass(frozen=True)
class FormatConfig:
    """Sizes that shape the padded and hacked storage formats."""

    warp_size: int
    max_ellg: int
    max_hll: int
    hll_hacksize: int
    max_diag: int
    max_hdiag: int
    hdia_hacksize: int
    ell_row_max: int

    def __post_init__(self) -> None:
        for item in fields(self):
            value = getattr(self, item.name)
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                raise ValueError(f"{item.name} must be a positive integer, got {value!r}")


@dataclass
class COOMatrix:
    """Coordinate format: one (row, column, value) triple per entry."""

    n: int
    ir: list[int] = field(default_factory=list)
    jc: list[int] = field(default_factory=list)
    val: list[float] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not len(self.ir) == len(self.jc) == len(self.val):
            raise ValueError("row, column and value lists must have the same length")

    @property
    def nnz(self) -> int:
        return len(self.val)


@dataclass
class DenseMatrix:
    """Full n-by-n matrix stored column by column."""

    n: int
    nnz: int
    val: list[float] = field(default_factory=list)

    def __post_init__(self) -> None:
        if len(self.val) != self.n * self.n:
            raise ValueError("dense storage must hold n*n values")


@dataclass
class CSRMatrix:
    """Compressed sparse row format."""

    n: int
    ia: list[int] = field(default_factory=list)
    ja: list[int] = field(default_factory=list)
    a: list[float] = field(default_factory=list)

    def __post_init__(self) -> None:
        if len(self.ia) != self.n + 1:
            raise ValueError("row pointer list must have n+1 entries")
        if len(self.ja) != len(self.a):
            raise ValueError("column and value lists must have the same length")

    @property
    def nnz(self) -> int:
        return len(self.a)

    def row_lengths(self) -> list[int]:
        """Number of stored entries in each row."""
        return [end - start for start, end in zip(self.ia, self.ia[1:])]


@dataclass
class JADMatrix:
    """Jagged diagonal format with rows permuted by decreasing length."""

    n: int
    nnz: int
    total: int
    ia: list[int]
    ja: list[int]
    a: list[float]
    njad: list[int]
    perm: list[int]


@dataclass
class ELLGMatrix:
    """ELLPACK format that also keeps the length of each row."""

    n: int
    nnz: int
    nell: list[int]
    stride: int
    a: list[float]
    jcoeff: list[int]


@dataclass
class HLLMatrix:
    """Hacked ELLPACK: ELLPACK blocks of a fixed number of rows."""

    n: int
    nnz: int
    total_mem: int
    nell: list[int]
    nhoff: int
    stride: int
    a: list[float]
    jcoeff: list[int]
    hoff: list[int]


@dataclass
class DIAMatrix:
    """Diagonal format: one stored vector per occupied diagonal."""

    n: int
    nnz: int
    ndiags: int
    stride: int
    diags: list[float]
    ioff: list[int]


@dataclass
class HDIAMatrix:
    """Hacked diagonal format: diagonal storage per block of rows."""

    n: int
    nnz: int
    memoff: list[int]
    ndiags: list[int]
    nhoff: int
    stride: int
    diags: list[float]
    ioff: list[int]
    hoff: list[int]


@dataclass
class HybELLGMatrix:
    """Short rows in ELL-G storage, long rows kept in CSR."""

    n: int
    nnz: int
    csr: CSRMatrix
    ellg: ELLGMatrix


@dataclass
class HybHLLMatrix:
    """Short rows in HLL storage, long rows kept in CSR."""

    n: int
    nnz: int
    csr: CSRMatrix
    hll: HLLMatrix