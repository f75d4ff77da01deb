import random

import pytest

from sparsefmt.coo import coo_to_csr
from sparsefmt.ell import (
    RowTooLongError,
    csr_to_ellg,
    csr_to_hll,
    csr_to_hybellg,
    csr_to_hybhll,
    split_hybrid,
    transpose_ellg,
)
from sparsefmt.formats import COOMatrix, FormatConfig


def _config(**overrides):
    values = dict(
        warp_size=4,
        max_ellg=3,
        max_hll=3,
        hll_hacksize=2,
        max_diag=8,
        max_hdiag=8,
        hdia_hacksize=2,
        ell_row_max=8,
    )
    values.update(overrides)
    return FormatConfig(**values)


def _csr(n, entries):
    return coo_to_csr(
        COOMatrix(
            n=n,
            ir=[r for r, _, _ in entries],
            jc=[c for _, c, _ in entries],
            val=[v for _, _, v in entries],
        )
    )


def _example():
    return _csr(3, [(1, 1, 1.0), (1, 3, 2.0), (2, 2, 3.0), (3, 1, 4.0), (3, 2, 5.0), (3, 3, 6.0)])


def _random_csr(seed, n, max_row):
    rng = random.Random(seed)
    entries = []
    for row in range(1, n + 1):
        cols = rng.sample(range(1, n + 1), rng.randint(0, min(max_row, n)))
        entries.extend((row, col, rng.uniform(1.0, 9.0)) for col in cols)
    return _csr(n, entries)


def _csr_entries(csr):
    result = {}
    for row, (start, end) in enumerate(zip(csr.ia, csr.ia[1:]), start=1):
        for pos in range(start - 1, end - 1):
            result[(row, csr.ja[pos])] = csr.a[pos]
    return result


def _ellg_entries(ellg):
    result = {}
    for row in range(ellg.n):
        for k in range(ellg.nell[row]):
            pos = k * ellg.stride + row
            result[(row + 1, ellg.jcoeff[pos])] = ellg.a[pos]
    return result


def _hll_entries(hll, hack):
    sums = {}
    for h in range(hll.nhoff - 1):
        lo, hi = h * hack, min((h + 1) * hack, hll.n)
        for row in range(lo, hi):
            for k in range(hll.nell[h]):
                pos = hll.hoff[h] - 1 + row - lo + k * hack
                key = (row + 1, hll.jcoeff[pos])
                sums[key] = sums.get(key, 0.0) + hll.a[pos]
    return {key: value for key, value in sums.items() if value != 0.0}


def test_ellg_worked_example():
    csr = _example()
    ellg = csr_to_ellg(csr, _config())
    assert ellg.nell == [2, 1, 3, 3, 1]
    assert ellg.a == [1.0, 3.0, 4.0, 0.0, 2.0, 0.0, 5.0, 0.0, 0.0, 0.0, 6.0, 0.0]
    assert ellg.jcoeff == [1, 2, 1, 1, 3, 1, 2, 1, 1, 1, 3, 1]
    assert ellg.nnz == csr.nnz


@pytest.mark.parametrize("seed", range(5))
def test_ellg_round_trip(seed):
    config = _config(max_ellg=10, warp_size=8)
    csr = _random_csr(seed, 11, 10)
    ellg = csr_to_ellg(csr, config)
    assert ellg.stride % config.warp_size == 0
    assert ellg.stride >= csr.n
    assert len(ellg.a) == ellg.nell[csr.n] * ellg.stride
    assert ellg.nell[: csr.n] == csr.row_lengths()
    assert _ellg_entries(ellg) == _csr_entries(csr)


def test_ellg_row_too_long_keeps_truncated_matrix():
    config = _config(max_ellg=2)
    csr = _example()
    with pytest.raises(RowTooLongError) as info:
        csr_to_ellg(csr, config)
    truncated = info.value.matrix
    assert info.value.longest == max(csr.row_lengths())
    assert truncated.nnz == sum(min(length, 2) for length in csr.row_lengths())
    assert truncated.nell[csr.n] == 2


def test_ellg_log_output(capsys):
    csr_to_ellg(_example(), _config(), log=True)
    out = capsys.readouterr().out
    assert out.startswith("ELL-G: Matrix N = 3, NNZ = 6\n")
    assert "jcoeff: " in out


@pytest.mark.parametrize("seed", range(5))
def test_hll_round_trip(seed):
    config = _config(max_hll=12, hll_hacksize=3)
    csr = _random_csr(seed, 10, 9)
    hll = csr_to_hll(csr, config)
    assert hll.nhoff == len(hll.hoff)
    assert hll.hoff[0] == 1
    for h in range(hll.nhoff - 1):
        assert hll.hoff[h + 1] - hll.hoff[h] == hll.nell[h] * config.hll_hacksize
    assert hll.total_mem == len(hll.a) == len(hll.jcoeff) == hll.hoff[-1] - 1
    assert hll.nell[hll.nhoff - 1] == max(hll.nell[: hll.nhoff - 1])
    assert hll.nnz == csr.nnz
    assert _hll_entries(hll, config.hll_hacksize) == _csr_entries(csr)


def test_hll_row_too_long():
    with pytest.raises(RowTooLongError) as info:
        csr_to_hll(_example(), _config(max_hll=1))
    assert info.value.matrix.nnz == _example().n


def test_hll_log_output(capsys):
    hll = csr_to_hll(_example(), _config(), log=True)
    out = capsys.readouterr().out
    assert f"Memory = {hll.total_mem} Units" in out
    assert "hoff: " in out


def _skewed():
    entries = [(1, 1, 1.0), (2, 2, 2.0), (3, 3, 3.0)]
    entries += [(4, col, float(col + 3)) for col in range(1, 5)]
    return _csr(4, entries)


def test_split_hybrid_separates_long_rows():
    csr = _skewed()
    short, long = split_hybrid(csr, _config())
    lengths = csr.row_lengths()
    assert short.row_lengths()[:3] == lengths[:3]
    assert long.row_lengths()[3] == lengths[3]
    assert short.row_lengths()[3] == 0
    assert long.nnz + short.nnz == csr.nnz
    merged = {**_csr_entries(short), **_csr_entries(long)}
    assert merged == _csr_entries(csr)


def test_split_hybrid_threshold_capped_by_row_max():
    csr = _csr(3, [(r, c, float(r * 10 + c)) for r in range(1, 4) for c in range(1, 4)])
    short, long = split_hybrid(csr, _config(ell_row_max=1))
    assert short.nnz == 0
    assert long.row_lengths() == csr.row_lengths()


def test_split_hybrid_empty_matrix():
    with pytest.raises(ValueError):
        split_hybrid(_csr(0, []), _config())


def test_hybellg_reconstructs_matrix(capsys):
    csr = _skewed()
    hyb = csr_to_hybellg(csr, _config())
    out = capsys.readouterr().out
    assert out.startswith("HYB(ELL-G): Original Matrix N = 4")
    assert hyb.n == csr.n and hyb.nnz == csr.nnz
    merged = {**_ellg_entries(hyb.ellg), **_csr_entries(hyb.csr)}
    assert merged == _csr_entries(csr)


def test_hybhll_reconstructs_matrix(capsys):
    config = _config()
    csr = _skewed()
    hyb = csr_to_hybhll(csr, config, log=True)
    out = capsys.readouterr().out
    assert out.startswith("HYB(HLL): Original Matrix N = 4")
    assert "CSR: Matrix N = 4" in out
    merged = {**_hll_entries(hyb.hll, config.hll_hacksize), **_csr_entries(hyb.csr)}
    assert merged == _csr_entries(csr)


def test_transpose_ellg_row_major_layout():
    ellg = csr_to_ellg(_random_csr(7, 6, 3), _config(max_ellg=3))
    width = ellg.nell[ellg.n]
    flipped = transpose_ellg(ellg)
    assert len(flipped.a) == len(ellg.a)
    for i in range(ellg.n):
        for j in range(width):
            assert flipped.a[i * width + j] == ellg.a[j * ellg.stride + i]
            assert flipped.jcoeff[i * width + j] == ellg.jcoeff[j * ellg.stride + i]
    assert flipped.nell == ellg.nell


def test_transpose_ellg_log(capsys):
    transpose_ellg(csr_to_ellg(_example(), _config()), log=True)
    assert capsys.readouterr().out.startswith("ELL-G: Matrix N = 3")