"""Random square sparse matrices in coordinate form, for exercising the formats.

Every generator returns a :class:`COOMatrix` whose row and column numbers are
1-based. Values are drawn uniformly from about (-10, 10) and scaled by a
random power of ten between 1e-10 and 1e10.

``flip`` walks the index range mirrored, as ``-(n-1) .. 0``, which after
taking absolute values visits rows or columns in reverse order. ``zigzag``
makes every odd outer index walk its inner range in the other direction.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional

from sparsefmt.formats import COOMatrix

_VALUE_LIMIT = 9.9999999999999
_EXPONENT_RANGE = (-10, 10)


@dataclass(frozen=True)
class _Span:
    """Forward and mirrored walks over the indices of one dimension."""

    start: int
    end: int
    start_flipped: int
    end_flipped: int

    def walk(self, reverse: bool, step: int = 1) -> range:
        if reverse:
            return range(self.start_flipped, self.end_flipped, step)
        return range(self.start, self.end, step)


def _span(n: int, flip: bool, first: int = 0) -> _Span:
    mirrored = -(n - first - 1)
    return _Span(
        start=mirrored if flip else first,
        end=1 if flip else n,
        start_flipped=first if flip else mirrored,
        end_flipped=n if flip else 1,
    )


def _check_order(n: int) -> None:
    if n <= 0:
        raise ValueError(f"matrix order must be positive, got {n}")


def _check_stddev(name: str, stddev: float) -> None:
    if stddev < 0:
        raise ValueError(f"{name} must not be negative, got {stddev}")


def _check_skip(skip: int) -> None:
    if skip <= 0:
        raise ValueError(f"skip must be positive, got {skip}")


def _value(rng: random.Random) -> float:
    mantissa = rng.uniform(-_VALUE_LIMIT, _VALUE_LIMIT)
    return mantissa * 10.0 ** rng.randint(*_EXPONENT_RANGE)


def _rng(rng: Optional[random.Random]) -> random.Random:
    return rng if rng is not None else random.Random()


class _Builder:
    def __init__(self, n: int, rng: random.Random):
        self.n = n
        self.rng = rng
        self.ir: list[int] = []
        self.jc: list[int] = []
        self.val: list[float] = []

    def add(self, i: int, j: int) -> None:
        self.ir.append(abs(i) + 1)
        self.jc.append(abs(j) + 1)
        self.val.append(_value(self.rng))

    def matrix(self) -> COOMatrix:
        return COOMatrix(n=self.n, ir=self.ir, jc=self.jc, val=self.val)


def _gauss_lines(
    n: int,
    mean: float,
    stddev: float,
    flip: bool,
    zigzag: bool,
    rng: Optional[random.Random],
    by_row: bool,
) -> COOMatrix:
    _check_order(n)
    rng = _rng(rng)
    out = _Builder(n, rng)
    span = _span(n, flip)
    for outer in span.walk(False):
        budget = rng.gauss(mean, stddev)
        for inner in span.walk(zigzag and outer % 2 != 0):
            # Once the budget is spent no roll can succeed any more.
            if budget <= 0:
                break
            roll_chance = int((n + budget - 1) / budget)
            if rng.randint(0, n) // roll_chance >= 1:
                if by_row:
                    out.add(outer, inner)
                else:
                    out.add(inner, outer)
                budget -= 1
    return out.matrix()


def generate_gauss_row(
    n: int,
    row_mean: float,
    row_stddev: float,
    flip: bool = False,
    zigzag: bool = False,
    rng: Optional[random.Random] = None,
) -> COOMatrix:
    """Fill each row with a normally distributed number of entries."""
    _check_stddev("row_stddev", row_stddev)
    return _gauss_lines(n, row_mean, row_stddev, flip, zigzag, rng, by_row=True)


def generate_gauss_col(
    n: int,
    col_mean: float,
    col_stddev: float,
    flip: bool = False,
    zigzag: bool = False,
    rng: Optional[random.Random] = None,
) -> COOMatrix:
    """Fill each column with a normally distributed number of entries."""
    _check_stddev("col_stddev", col_stddev)
    return _gauss_lines(n, col_mean, col_stddev, flip, zigzag, rng, by_row=False)


def generate_gauss_full(
    n: int,
    row_mean: float,
    row_stddev: float,
    col_mean: float,
    col_stddev: float,
    flip: bool = False,
    zigzag: bool = False,
    rng: Optional[random.Random] = None,
) -> COOMatrix:
    """Fill slots whose row and column both still want entries under normal draws."""
    _check_order(n)
    _check_stddev("row_stddev", row_stddev)
    _check_stddev("col_stddev", col_stddev)
    rng = _rng(rng)
    out = _Builder(n, rng)
    span = _span(n, flip)
    row_used = [0] * n
    col_used = [0] * n
    for j in span.walk(False):
        for i in span.walk(zigzag and j % 2 != 0):
            want_row = int(rng.gauss(row_mean, row_stddev) - row_used[abs(i)])
            want_col = int(rng.gauss(col_mean, col_stddev) - col_used[abs(j)])
            if want_row > 0 and want_col > 0:
                row_roll = (n + want_row - 1) // want_row
                col_roll = (n + want_col - 1) // want_col
                roll = rng.randint(0, n)
                if roll // (row_roll * col_roll) >= 1:
                    out.add(i, j)
                    row_used[abs(i)] += 1
                    col_used[abs(j)] += 1
    return out.matrix()


def generate_imbalanced_row(
    n: int,
    start: int,
    skip: int,
    flip: bool = False,
    rng: Optional[random.Random] = None,
) -> COOMatrix:
    """Fill every ``skip``-th row from ``start`` completely, column by column."""
    _check_order(n)
    _check_skip(skip)
    out = _Builder(n, _rng(rng))
    rows = _span(n, flip, start)
    cols = _span(n, flip)
    for j in cols.walk(False):
        for i in rows.walk(False, skip):
            out.add(i, j)
    return out.matrix()


def generate_imbalanced_col(
    n: int,
    start: int,
    skip: int,
    flip: bool = False,
    zigzag: bool = False,
    rng: Optional[random.Random] = None,
) -> COOMatrix:
    """Fill every ``skip``-th column from ``start`` completely, row by row."""
    _check_order(n)
    _check_skip(skip)
    out = _Builder(n, _rng(rng))
    rows = _span(n, flip)
    cols = _span(n, flip, start)
    for i in rows.walk(False):
        for j in cols.walk(zigzag and i % 2 != 0, skip):
            out.add(i, j)
    return out.matrix()