"""Reading coordinate matrices and converting them to dense and CSR storage."""

from __future__ import annotations

import sys
from collections import Counter
from itertools import accumulate
from typing import IO

from sparsefmt.formats import COOMatrix, CSRMatrix, DenseMatrix
from sparsefmt.mmio import (
    MATRIX_MARKET_BANNER,
    MM_COULD_NOT_READ_FILE,
    MM_COULD_NOT_WRITE_FILE,
    MM_PREMATURE_EOF,
    MM_UNSUPPORTED_TYPE,
    MatrixMarketError,
    read_banner,
    read_crd_size,
)


def _open(path: str, mode: str, code: int) -> IO[str]:
    try:
        return open(path, mode, encoding="utf-8")
    except OSError as exc:
        raise MatrixMarketError(f"Unable to open file {path}", code) from exc


def _read_entry(f: IO[str]) -> tuple[int, int, float]:
    while True:
        line = f.readline()
        if not line:
            raise MatrixMarketError("premature end of file", MM_PREMATURE_EOF)
        if line.strip():
            break
    tokens = line.split()
    if len(tokens) < 3:
        raise MatrixMarketError(f"malformed entry: {line.strip()!r}", MM_PREMATURE_EOF)
    try:
        return int(float(tokens[0])), int(float(tokens[1])), float(tokens[2])
    except ValueError as exc:
        raise MatrixMarketError(f"malformed entry: {line.strip()!r}", MM_PREMATURE_EOF) from exc


def read_matrix_market_coo(path: str, log: bool = False) -> COOMatrix:
    """Read a square, sparse, real Matrix Market file; symmetric files are expanded."""
    with _open(path, "r", MM_COULD_NOT_READ_FILE) as f:
        typecode = read_banner(f)
        if not typecode.is_valid():
            raise MatrixMarketError("Invalid Matrix Market file.", MM_UNSUPPORTED_TYPE)
        if not (typecode.is_real and typecode.is_coordinate and typecode.is_sparse):
            raise MatrixMarketError(
                "Only sparse real-valued coordinate matrices are supported",
                MM_UNSUPPORTED_TYPE,
            )
        nrow, ncol, nnz = read_crd_size(f)
        if nrow != ncol:
            raise ValueError("This is not a square matrix!")
        entries = [_read_entry(f) for _ in range(nnz)]

    if typecode.is_symmetric:
        entries += [(col, row, value) for row, col, value in entries if row != col]

    coo = COOMatrix(
        n=nrow,
        ir=[row for row, _, _ in entries],
        jc=[col for _, col, _ in entries],
        val=[value for _, _, value in entries],
    )
    if log:
        out = sys.stdout
        out.write(f"COO: Matrix N = {coo.n}, NNZ = {coo.nnz}\n")
        for row, col, value in zip(coo.ir, coo.jc, coo.val):
            out.write("%d %d %20.19g\n" % (row, col, value))
        out.write("\n")
    return coo


def write_coo_matrix_market(coo: COOMatrix, path: str) -> None:
    """Write ``coo`` as a general real coordinate Matrix Market file."""
    with _open(path, "w", MM_COULD_NOT_WRITE_FILE) as f:
        f.write(f"{MATRIX_MARKET_BANNER} matrix coordinate real general\n")
        f.write(f"{coo.n} {coo.n} {coo.nnz}\n")
        for row, col, value in zip(coo.ir, coo.jc, coo.val):
            f.write("%d %d %20.13e\n" % (row, col, value))


def _check_indices(coo: COOMatrix) -> None:
    for row, col in zip(coo.ir, coo.jc):
        if not (1 <= row <= coo.n and 1 <= col <= coo.n):
            raise ValueError(f"entry ({row}, {col}) lies outside a {coo.n}x{coo.n} matrix")


def coo_to_dense(coo: COOMatrix, log: bool = False) -> DenseMatrix:
    """Expand ``coo`` into a full matrix stored column by column."""
    _check_indices(coo)
    n = coo.n
    val = [0.0] * (n * n)
    for row, col, value in zip(coo.ir, coo.jc, coo.val):
        val[(col - 1) * n + (row - 1)] = value
    dense = DenseMatrix(n=n, nnz=coo.nnz, val=val)
    if log:
        out = sys.stdout
        out.write(f"MAT: Matrix N = {n}, NNZ = {dense.nnz}\n")
        for i in range(n):
            out.write("".join("%20.19g " % v for v in val[i * n:(i + 1) * n]))
            out.write("\n")
        out.write("\n")
    return dense


def coo_to_csr(coo: COOMatrix, log: bool = False) -> CSRMatrix:
    """Convert ``coo`` to CSR, keeping the input order of entries within a row."""
    _check_indices(coo)
    n = coo.n
    counts = Counter(coo.ir)
    ia = list(accumulate((counts.get(row, 0) for row in range(1, n + 1)), initial=1))
    order = sorted(range(coo.nnz), key=coo.ir.__getitem__)
    csr = CSRMatrix(
        n=n,
        ia=ia,
        ja=[coo.jc[k] for k in order],
        a=[coo.val[k] for k in order],
    )
    if log:
        out = sys.stdout
        out.write(f"CSR: Matrix N = {csr.n}, NNZ = {csr.nnz}\n")
        out.write("ja | a\n")
        for col, value in zip(csr.ja, csr.a):
            out.write("%d %20.19g\n" % (col, value))
        out.write("\n")
        out.write("ia: \n")
        out.write("".join(f"{p} " for p in csr.ia))
        out.write("\n")
    return csr