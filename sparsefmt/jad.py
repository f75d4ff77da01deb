"""Jagged diagonal storage built from CSR."""

from __future__ import annotations

import sys
from collections import Counter
from dataclasses import replace
from itertools import pairwise
from typing import Sequence

from sparsefmt.formats import CSRMatrix, FormatConfig, JADMatrix


def dcsort(ival: Sequence[int], n: int, ilo: int, ihi: int) -> list[int]:
    """Distribution count sort: indices of the first ``n`` values by decreasing value.

    Ties keep increasing index order. Every value must lie in [ilo, ihi].
    """
    keys = list(ival[:n])
    if len(keys) != n:
        raise ValueError(f"expected at least {n} values, got {len(keys)}")
    for value in keys:
        if not ilo <= value <= ihi:
            raise ValueError(f"value {value} outside range [{ilo}, {ihi}]")
    counts = Counter(keys)
    next_slot = {}
    position = 0
    for value in range(ihi, ilo - 1, -1):
        next_slot[value] = position
        position += counts[value]
    index = [0] * n
    for j, value in enumerate(keys):
        index[next_slot[value]] = j
        next_slot[value] += 1
    return index


def pad_jad_warp(jad: JADMatrix, warp_size: int) -> JADMatrix:
    """Pad every jagged diagonal to a multiple of ``warp_size`` entries.

    Padding holds the value 0.0 and column 1.
    """
    if warp_size <= 0:
        raise ValueError("warp_size must be positive")
    ia = [1]
    a: list[float] = []
    ja: list[int] = []
    for start, end in pairwise(jad.ia):
        length = end - start
        padded = (length + warp_size - 1) // warp_size * warp_size
        a.extend(jad.a[start - 1:end - 1])
        a.extend([0.0] * (padded - length))
        ja.extend(jad.ja[start - 1:end - 1])
        ja.extend([1] * (padded - length))
        ia.append(ia[-1] + padded)
    return replace(jad, total=len(a), ia=ia, ja=ja, a=a)


def _log_jad(jad: JADMatrix) -> None:
    out = sys.stdout
    out.write(f"JAD: Matrix N = {jad.n}, NNZ = {jad.nnz}\n")
    out.write("njad: " + "".join(f"{v} " for v in jad.njad) + "\n")
    out.write("ia: " + "".join(f"{v} " for v in jad.ia) + "\n")
    out.write("ja: " + "".join(f"{v} " for v in jad.ja) + "\n")
    out.write("a: " + "".join("%g " % v for v in jad.a) + "\n")
    out.write("perm: " + "".join(f"{v} " for v in jad.perm) + "\n")


def csr_to_jad(csr: CSRMatrix, config: FormatConfig, log: bool = False) -> JADMatrix:
    """Convert ``csr`` to jagged diagonal storage padded to the warp size.

    ``njad`` holds the row lengths followed by the longest and shortest length;
    ``perm`` lists 0-based rows by decreasing length.
    """
    n = csr.n
    lengths = csr.row_lengths()
    longest = max(lengths, default=0)
    shortest = min([n, *lengths])
    njad = [*lengths, longest, shortest]
    perm = dcsort(njad, n, shortest, longest)

    diag_rows = [sum(1 for length in lengths if length > jj) for jj in range(longest)]

    ia = [1]
    a: list[float] = []
    ja: list[int] = []
    for jj, count in enumerate(diag_rows):
        for row in perm[:count]:
            pos = csr.ia[row] + jj - 1
            a.append(csr.a[pos])
            ja.append(csr.ja[pos])
        ia.append(len(a) + 1)

    jad = JADMatrix(
        n=n,
        nnz=csr.nnz,
        total=csr.nnz,
        ia=ia,
        ja=ja,
        a=a,
        njad=njad,
        perm=perm,
    )
    jad = pad_jad_warp(jad, config.warp_size)
    if log:
        _log_jad(jad)
    return jad