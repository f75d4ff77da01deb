import pytest

from sparsefmt.dia import (
    TooManyDiagonalsError,
    csr_to_dia,
    csr_to_hdia,
    hinfdia,
    infdia,
    transpose_dia,
)
from sparsefmt.formats import CSRMatrix, FormatConfig


def make_config(max_diag=3, max_hdiag=3, hdia_hacksize=2, warp_size=4):
    return FormatConfig(
        warp_size=warp_size,
        max_ellg=8,
        max_hll=8,
        hll_hacksize=2,
        max_diag=max_diag,
        max_hdiag=max_hdiag,
        hdia_hacksize=hdia_hacksize,
        ell_row_max=8,
    )


def tridiagonal(n):
    ia = [1]
    ja = []
    a = []
    for row in range(n):
        for col in range(max(0, row - 1), min(n, row + 2)):
            ja.append(col + 1)
            a.append(float(10 * (row + 1) + col + 1))
        ia.append(len(a) + 1)
    return CSRMatrix(n=n, ia=ia, ja=ja, a=a)


def with_corner(n):
    csr = tridiagonal(n)
    ia = csr.ia[:]
    ja = csr.ja[:2] + [n] + csr.ja[2:]
    a = csr.a[:2] + [99.0] + csr.a[2:]
    ia = [ia[0]] + [p + 1 for p in ia[1:]]
    return CSRMatrix(n=n, ia=ia, ja=ja, a=a)


def dense_of_csr(csr):
    dense = [[0.0] * csr.n for _ in range(csr.n)]
    for row in range(csr.n):
        for k in range(csr.ia[row] - 1, csr.ia[row + 1] - 1):
            dense[row][csr.ja[k] - 1] = csr.a[k]
    return dense


def dense_of_dia(dia):
    dense = [[0.0] * dia.n for _ in range(dia.n)]
    for l, offset in enumerate(dia.ioff):
        for row in range(dia.n):
            col = row + offset
            if 0 <= col < dia.n:
                dense[row][col] += dia.diags[l * dia.stride + row]
    return dense


def dense_of_hdia(hdia):
    hack = hdia.stride
    dense = [[0.0] * hdia.n for _ in range(hdia.n)]
    base = 0
    for h in range(hdia.nhoff - 1):
        lo = h * hack
        hi = min(lo + hack, hdia.n)
        for l in range(hdia.ndiags[h]):
            offset = hdia.ioff[hdia.hoff[h] + l]
            for row in range(lo, hi):
                col = row + offset
                if 0 <= col < hdia.n:
                    dense[row][col] += hdia.diags[base + l * hack + row - lo]
        base += hdia.ndiags[h] * hack
    return dense


def test_infdia_tridiagonal_counts():
    csr = tridiagonal(3)
    assert infdia(3, csr.ja, csr.ia) == [0, 2, 3, 2, 0]


def test_infdia_total_equals_nnz():
    csr = with_corner(5)
    counts = infdia(5, csr.ja, csr.ia)
    assert len(counts) == 9
    assert sum(counts) == csr.nnz


def test_hinfdia_counts_only_block_rows():
    csr = tridiagonal(6)
    counts = hinfdia(2, 4, 6, csr.ja, csr.ia)
    assert sum(counts) == csr.ia[4] - csr.ia[2]
    occupied = [k + 1 - 4 for k, c in enumerate(counts) if c > 0]
    assert occupied == [-1, 0, 1]


def test_hinfdia_rejects_bad_column():
    csr = CSRMatrix(n=2, ia=[1, 2, 2], ja=[5], a=[1.0])
    with pytest.raises(ValueError):
        hinfdia(0, 2, 2, csr.ja, csr.ia)


def test_csr_to_dia_tridiagonal_offsets_and_round_trip():
    csr = tridiagonal(5)
    dia = csr_to_dia(csr, make_config())
    assert dia.ioff == [-1, 0, 1]
    assert dia.ndiags == 3
    assert dia.nnz == csr.nnz
    assert dense_of_dia(dia) == dense_of_csr(csr)


def test_csr_to_dia_stride_is_warp_padded():
    csr = tridiagonal(5)
    dia = csr_to_dia(csr, make_config(warp_size=4))
    assert dia.stride % 4 == 0
    assert dia.stride >= dia.n
    assert len(dia.diags) == dia.stride * dia.ndiags


def test_csr_to_dia_too_many_diagonals():
    csr = with_corner(4)
    with pytest.raises(TooManyDiagonalsError) as info:
        csr_to_dia(csr, make_config(max_diag=3))
    assert info.value.count == 4
    assert info.value.matrix.ndiags == 3
    assert info.value.matrix.ioff == [-1, 0, 1]


def test_csr_to_dia_log_output(capsys):
    csr = tridiagonal(3)
    csr_to_dia(csr, make_config(), log=True)
    out = capsys.readouterr().out
    assert "DIA: Matrix N = 3, NNZ = 7" in out
    assert "ndiags: 3" in out


def test_transpose_dia_layout():
    csr = tridiagonal(5)
    dia = csr_to_dia(csr, make_config())
    flipped = transpose_dia(dia)
    assert len(flipped.diags) == len(dia.diags)
    assert flipped.ioff == dia.ioff
    for row in range(dia.n):
        for l in range(dia.ndiags):
            assert flipped.diags[row * dia.ndiags + l] == dia.diags[l * dia.stride + row]
    assert all(v == 0.0 for v in flipped.diags[dia.n * dia.ndiags:])


def test_csr_to_hdia_round_trip():
    csr = tridiagonal(5)
    hdia = csr_to_hdia(csr, make_config(hdia_hacksize=2, max_hdiag=3))
    assert dense_of_hdia(hdia) == dense_of_csr(csr)
    assert hdia.nnz == csr.nnz


def test_csr_to_hdia_bookkeeping():
    csr = with_corner(5)
    hdia = csr_to_hdia(csr, make_config(hdia_hacksize=2, max_hdiag=4))
    assert hdia.stride == 2
    assert hdia.nhoff == 4
    assert len(hdia.ndiags) == hdia.nhoff
    assert hdia.ndiags[-1] == max(hdia.ndiags[:-1])
    assert hdia.hoff[-1] == len(hdia.ioff)
    assert hdia.memoff[-1] == len(hdia.diags)
    assert len(hdia.diags) == sum(hdia.ndiags[:-1]) * hdia.stride
    assert dense_of_hdia(hdia) == dense_of_csr(csr)


def test_csr_to_hdia_too_many_diagonals():
    csr = tridiagonal(4)
    with pytest.raises(TooManyDiagonalsError) as info:
        csr_to_hdia(csr, make_config(hdia_hacksize=2, max_hdiag=2))
    assert info.value.count == 3
    assert all(count <= 2 for count in info.value.matrix.ndiags)


def test_csr_to_hdia_log_output(capsys):
    csr = tridiagonal(4)
    csr_to_hdia(csr, make_config(), log=True)
    out = capsys.readouterr().out
    assert "HDIA: Matrix N = 4, NNZ = 10" in out
    assert "memoff: " in out