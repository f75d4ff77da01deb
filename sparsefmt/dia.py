"""Diagonal storage built from CSR: DIA and hacked DIA."""

from __future__ import annotations

import sys
from dataclasses import replace
from typing import Sequence

from sparsefmt.formats import CSRMatrix, DIAMatrix, FormatConfig, HDIAMatrix


class TooManyDiagonalsError(ValueError):
    """The matrix occupies more diagonals than the format can store.

    ``matrix`` is the converted matrix holding only the first diagonals that
    fit; ``count`` is the number of occupied diagonals found.
    """

    def __init__(self, message: str, matrix, count: int):
        super().__init__(message)
        self.matrix = matrix
        self.count = count


def _padded(count: int, multiple: int) -> int:
    return (count + multiple - 1) // multiple * multiple


def _join(values, fmt: str = "%d") -> str:
    return "".join(fmt % v + " " for v in values)


def hinfdia(
    lowerb: int, higherb: int, n: int, ja: Sequence[int], ia: Sequence[int]
) -> list[int]:
    """Count the entries of rows ``lowerb`` to ``higherb - 1`` on each diagonal.

    Returns 2n-1 counts; the diagonal with offset ``col - row`` is found at
    index ``higherb - 1 + offset``.
    """
    if not 0 <= lowerb <= higherb <= n:
        raise ValueError(f"row range [{lowerb}, {higherb}) is not within 0..{n}")
    ind = [0] * max(2 * n - 1, 0)
    for row in range(lowerb, higherb):
        for col in ja[ia[row] - 1:ia[row + 1] - 1]:
            if not 1 <= col <= n:
                raise ValueError(f"column {col} lies outside a matrix of order {n}")
            ind[higherb + col - row - 2] += 1
    return ind


def infdia(n: int, ja: Sequence[int], ia: Sequence[int]) -> list[int]:
    """Count the entries on each diagonal; index ``n - 1 + offset`` holds offset's count."""
    return hinfdia(0, n, n, ja, ia)


def _select_offsets(ind: Sequence[int], base: int, limit: int) -> tuple[list[int], int]:
    offsets = [k + 1 - base for k, count in enumerate(ind) if count > 0]
    return offsets[:limit], len(offsets)


def _row_entries(csr: CSRMatrix, row: int):
    start, end = csr.ia[row] - 1, csr.ia[row + 1] - 1
    return zip(csr.ja[start:end], csr.a[start:end])


def _log_dia(dia: DIAMatrix) -> None:
    out = sys.stdout
    out.write(f"DIA: Matrix N = {dia.n}, NNZ = {dia.nnz}\n")
    out.write(f"ndiags: {dia.ndiags}\n")
    out.write("diags: " + _join(dia.diags, "%g") + "\n")
    out.write("ioff: " + _join(dia.ioff) + "\n")


def _log_hdia(hdia: HDIAMatrix) -> None:
    out = sys.stdout
    out.write(f"HDIA: Matrix N = {hdia.n}, NNZ = {hdia.nnz}\n")
    out.write("ndiags: " + _join(hdia.ndiags) + "\n")
    out.write("diags: " + _join(hdia.diags, "%g") + "\n")
    out.write("ioff: " + _join(hdia.ioff) + "\n")
    out.write("hoff: " + _join(hdia.hoff) + "\n")
    out.write("memoff: " + _join(hdia.memoff) + "\n")


def csr_to_dia(csr: CSRMatrix, config: FormatConfig, log: bool = False) -> DIAMatrix:
    """Convert ``csr`` to DIA storage.

    Diagonals are kept in increasing offset order; diagonal ``l`` occupies
    ``diags[l*stride:(l+1)*stride]`` indexed by row, with a warp-padded stride.
    Raises TooManyDiagonalsError if more than ``config.max_diag`` are occupied.
    """
    n = csr.n
    stride = _padded(n, config.warp_size)
    offsets, total = _select_offsets(infdia(n, csr.ja, csr.ia), n, config.max_diag)
    position = {offset: l for l, offset in enumerate(offsets)}
    diags = [0.0] * (stride * len(offsets))
    for row in range(n):
        for col, value in _row_entries(csr, row):
            l = position.get(col - 1 - row)
            if l is not None:
                diags[l * stride + row] = value
    dia = DIAMatrix(
        n=n,
        nnz=csr.nnz,
        ndiags=len(offsets),
        stride=stride,
        diags=diags,
        ioff=offsets,
    )
    if total > config.max_diag:
        raise TooManyDiagonalsError(
            f"{total} diagonals exceed DIA limit {config.max_diag}", dia, total
        )
    if log:
        _log_dia(dia)
    return dia


def csr_to_hdia(csr: CSRMatrix, config: FormatConfig, log: bool = False) -> HDIAMatrix:
    """Convert ``csr`` to hacked DIA with blocks of ``config.hdia_hacksize`` rows.

    Each block stores its own diagonals, ``hacksize`` values per diagonal.
    ``hoff`` holds the 0-based start of each block's offsets in ``ioff``;
    ``ndiags`` holds each block's diagonal count followed by the largest;
    ``memoff`` holds, per block after the first, its value start minus the
    previous block's end row, and ends with the total value count.
    Raises TooManyDiagonalsError if a block holds more than ``config.max_hdiag``.
    """
    n = csr.n
    hack = config.hdia_hacksize
    limit = config.max_hdiag
    nhacks = (n + hack - 1) // hack

    hoff = [0]
    ndiags: list[int] = []
    ioff: list[int] = []
    diags: list[float] = []
    memoff = [0]
    most = 0
    for h in range(nhacks):
        lo, hi = h * hack, min((h + 1) * hack, n)
        offsets, total = _select_offsets(hinfdia(lo, hi, n, csr.ja, csr.ia), hi, limit)
        most = max(most, total)
        position = {offset: l for l, offset in enumerate(offsets)}
        block = [0.0] * (len(offsets) * hack)
        for row in range(lo, hi):
            for col, value in _row_entries(csr, row):
                l = position.get(col - 1 - row)
                if l is not None:
                    block[l * hack + row - lo] = value
        diags.extend(block)
        ioff.extend(offsets)
        ndiags.append(len(offsets))
        hoff.append(hoff[-1] + len(offsets))
        memoff.append(len(diags) - hi)
    ndiags.append(max(ndiags, default=0))
    memoff[-1] = len(diags)

    hdia = HDIAMatrix(
        n=n,
        nnz=csr.nnz,
        memoff=memoff,
        ndiags=ndiags,
        nhoff=nhacks + 1,
        stride=hack,
        diags=diags,
        ioff=ioff,
        hoff=hoff,
    )
    if most > limit:
        raise TooManyDiagonalsError(
            f"a block with {most} diagonals exceeds HDIA limit {limit}", hdia, most
        )
    if log:
        _log_hdia(hdia)
    return hdia


def transpose_dia(dia: DIAMatrix, log: bool = False) -> DIAMatrix:
    """Return ``dia`` with values laid out row by row instead of diagonal by diagonal.

    Row i's values occupy positions i*ndiags .. i*ndiags+ndiags-1; the padding
    rows at the end hold 0.0.
    """
    size = dia.ndiags * dia.stride
    values = [
        dia.diags[j * dia.stride + i] for i in range(dia.n) for j in range(dia.ndiags)
    ]
    result = replace(dia, diags=values + [0.0] * (size - len(values)))
    if log:
        _log_dia(result)
    return result