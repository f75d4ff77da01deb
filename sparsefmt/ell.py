"""ELLPACK-style storage built from CSR: ELL-G, hacked ELLPACK and hybrids."""

from __future__ import annotations

import sys
from dataclasses import replace

from sparsefmt.formats import (
    CSRMatrix,
    ELLGMatrix,
    FormatConfig,
    HLLMatrix,
    HybELLGMatrix,
    HybHLLMatrix,
)


class RowTooLongError(ValueError):
    """A row holds more entries than the format can store.

    ``matrix`` is the converted matrix with the excess entries dropped.
    """

    def __init__(self, message: str, matrix, longest: int):
        super().__init__(message)
        self.matrix = matrix
        self.longest = longest


def _padded(count: int, multiple: int) -> int:
    return (count + multiple - 1) // multiple * multiple


def _join(values, fmt: str = "%d") -> str:
    return "".join(fmt % v + " " for v in values)


def _log_ellg(ellg: ELLGMatrix) -> None:
    out = sys.stdout
    out.write(f"ELL-G: Matrix N = {ellg.n}, NNZ = {ellg.nnz}\n")
    out.write("nell: " + _join(ellg.nell) + "\n")
    out.write("a: " + _join(ellg.a, "%g") + "\n")
    out.write("jcoeff: " + _join(ellg.jcoeff) + "\n")


def _log_hll(hll: HLLMatrix) -> None:
    out = sys.stdout
    out.write(f"HLL: Matrix N = {hll.n}, NNZ = {hll.nnz}, Memory = {hll.total_mem} Units\n")
    out.write("nell: " + _join(hll.nell) + "\n")
    out.write("a: " + _join(hll.a, "%g") + "\n")
    out.write("jcoeff: " + _join(hll.jcoeff) + "\n")
    out.write("hoff: " + _join(hll.hoff) + "\n")


def _log_csr(csr: CSRMatrix) -> None:
    out = sys.stdout
    out.write(f"CSR: Matrix N = {csr.n}, NNZ = {csr.nnz}\n")
    out.write("ja | a\n")
    for col, value in zip(csr.ja, csr.a):
        out.write("%d %20.19g\n" % (col, value))
    out.write("\n")
    out.write("ia: \n")
    out.write(_join(csr.ia))
    out.write("\n")


def _build_ellg(csr: CSRMatrix, config: FormatConfig) -> tuple[ELLGMatrix, int]:
    n = csr.n
    stride = _padded(n, config.warp_size)
    lengths = csr.row_lengths()
    kept = [min(length, config.max_ellg) for length in lengths]
    width = max(kept, default=0)
    shortest = min([n, *kept])
    a = [0.0] * (width * stride)
    jcoeff = [1] * (width * stride)
    for row, count in enumerate(kept):
        start = csr.ia[row] - 1
        a[row:row + count * stride:stride] = csr.a[start:start + count]
        jcoeff[row:row + count * stride:stride] = csr.ja[start:start + count]
    ellg = ELLGMatrix(
        n=n,
        nnz=sum(kept),
        nell=[*kept, width, shortest],
        stride=stride,
        a=a,
        jcoeff=jcoeff,
    )
    return ellg, max(lengths, default=0)


def csr_to_ellg(csr: CSRMatrix, config: FormatConfig, log: bool = False) -> ELLGMatrix:
    """Convert ``csr`` to ELL-G, stored column-major with a warp-padded stride.

    ``nell`` holds each row's stored length, then the longest and shortest.
    Raises RowTooLongError if a row is longer than ``config.max_ellg``.
    """
    ellg, longest = _build_ellg(csr, config)
    if log:
        _log_ellg(ellg)
    if longest > config.max_ellg:
        raise RowTooLongError(
            f"row of length {longest} exceeds ELL-G limit {config.max_ellg}", ellg, longest
        )
    return ellg


def _build_hll(csr: CSRMatrix, config: FormatConfig) -> tuple[HLLMatrix, int]:
    n = csr.n
    hack = config.hll_hacksize
    limit = config.max_hll
    lengths = csr.row_lengths()
    nhacks = (n + hack - 1) // hack
    bounds = [(h * hack, min((h + 1) * hack, n)) for h in range(nhacks)]

    widths = [max(min(length, limit) for length in lengths[lo:hi]) for lo, hi in bounds]
    hoff = [1]
    for width in widths:
        hoff.append(hoff[-1] + width * hack)
    total_mem = hoff[-1] - hoff[0]

    a = [0.0] * total_mem
    jcoeff = [1] * total_mem
    nnz = 0
    for (lo, hi), base in zip(bounds, hoff):
        for row in range(lo, hi):
            count = min(lengths[row], limit)
            start = csr.ia[row] - 1
            pos = base - 1 + row - lo
            a[pos:pos + count * hack:hack] = csr.a[start:start + count]
            jcoeff[pos:pos + count * hack:hack] = csr.ja[start:start + count]
            nnz += count

    widest = max(widths, default=0)
    hll = HLLMatrix(
        n=n,
        nnz=nnz,
        total_mem=total_mem,
        nell=[*widths, widest, min([n, *widths, widest])],
        nhoff=nhacks + 1,
        stride=_padded(n, config.warp_size),
        a=a,
        jcoeff=jcoeff,
        hoff=hoff,
    )
    return hll, max(lengths, default=0)


def csr_to_hll(csr: CSRMatrix, config: FormatConfig, log: bool = False) -> HLLMatrix:
    """Convert ``csr`` to hacked ELLPACK with blocks of ``config.hll_hacksize`` rows.

    ``hoff`` holds the 1-based start of each block in ``a``; ``nell`` holds each
    block's width, then the widest and narrowest.
    Raises RowTooLongError if a row is longer than ``config.max_hll``.
    """
    hll, longest = _build_hll(csr, config)
    if log:
        _log_hll(hll)
    if longest > config.max_hll:
        raise RowTooLongError(
            f"row of length {longest} exceeds HLL limit {config.max_hll}", hll, longest
        )
    return hll


def _hybrid_threshold(csr: CSRMatrix, config: FormatConfig) -> tuple[int, int]:
    if csr.n <= 0:
        raise ValueError("a hybrid split needs at least one row")
    average = sum(csr.row_lengths()) // csr.n
    threshold = 1
    while average >= threshold and threshold <= config.ell_row_max:
        threshold <<= 1
    return average, threshold


def split_hybrid(csr: CSRMatrix, config: FormatConfig) -> tuple[CSRMatrix, CSRMatrix]:
    """Split ``csr`` into (short rows, long rows), both with all ``n`` rows.

    A row is short if its length is at most the first power of two above the
    average row length, the doubling stopping once it passes ``ell_row_max``.
    """
    _, threshold = _hybrid_threshold(csr, config)
    short_ia, long_ia = [1], [1]
    short_ja: list[int] = []
    short_a: list[float] = []
    long_ja: list[int] = []
    long_a: list[float] = []
    offset = 0
    for length in csr.row_lengths():
        cols = csr.ja[offset:offset + length]
        vals = csr.a[offset:offset + length]
        offset += length
        if length <= threshold:
            short_ja.extend(cols)
            short_a.extend(vals)
            short_ia.append(short_ia[-1] + length)
            long_ia.append(long_ia[-1])
        else:
            long_ja.extend(cols)
            long_a.extend(vals)
            long_ia.append(long_ia[-1] + length)
            short_ia.append(short_ia[-1])
    short = CSRMatrix(n=csr.n, ia=short_ia, ja=short_ja, a=short_a)
    long = CSRMatrix(n=csr.n, ia=long_ia, ja=long_ja, a=long_a)
    return short, long


def csr_to_hybellg(csr: CSRMatrix, config: FormatConfig, log: bool = False) -> HybELLGMatrix:
    """Store short rows of ``csr`` in ELL-G and long rows in CSR."""
    average, _ = _hybrid_threshold(csr, config)
    short, long = split_hybrid(csr, config)
    out = sys.stdout
    out.write(
        f"HYB(ELL-G): Original Matrix N = {csr.n}, NNZ = {csr.nnz}, AVG NNZ/ROW = {average}\n"
    )
    out.write(
        f"            ELL-G part: NNZ = {short.nnz}            CSR part: NNZ = {long.nnz}\n"
    )
    ellg, _ = _build_ellg(short, config)
    if log:
        _log_ellg(ellg)
        _log_csr(long)
    return HybELLGMatrix(n=csr.n, nnz=csr.nnz, csr=long, ellg=ellg)


def csr_to_hybhll(csr: CSRMatrix, config: FormatConfig, log: bool = False) -> HybHLLMatrix:
    """Store short rows of ``csr`` in HLL and long rows in CSR."""
    average, _ = _hybrid_threshold(csr, config)
    short, long = split_hybrid(csr, config)
    out = sys.stdout
    out.write(
        f"HYB(HLL): Original Matrix N = {csr.n}, NNZ = {csr.nnz}, AVG NNZ/ROW = {average}\n"
    )
    out.write(
        f"          HLL part: NNZ = {short.nnz}              CSR part: NNZ = {long.nnz}\n"
    )
    hll, _ = _build_hll(short, config)
    if log:
        _log_hll(hll)
        _log_csr(long)
    return HybHLLMatrix(n=csr.n, nnz=csr.nnz, csr=long, hll=hll)


def transpose_ellg(ellg: ELLGMatrix, log: bool = False) -> ELLGMatrix:
    """Return ``ellg`` with its values laid out row by row instead of column by column.

    Row i's entries occupy positions i*width .. i*width+width-1, where width is
    the longest stored row; the rest of the storage holds 0.0 and column 1.
    """
    n = ellg.n
    width = ellg.nell[n]
    size = width * ellg.stride
    order = [j * ellg.stride + i for i in range(n) for j in range(width)]
    a = [ellg.a[pos] for pos in order] + [0.0] * (size - len(order))
    jcoeff = [ellg.jcoeff[pos] for pos in order] + [1] * (size - len(order))
    result = replace(ellg, a=a, jcoeff=jcoeff)
    if log:
        _log_ellg(result)
    return result