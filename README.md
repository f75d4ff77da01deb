# sparsefmt

Read and write Matrix Market files, generate random sparse test matrices, and
convert square sparse matrices between the storage layouts used by sparse
matrix–vector multiplication kernels:

- COO (coordinate) and dense (column by column)
- CSR (compressed sparse row)
- JAD (jagged diagonal), each diagonal padded to a warp multiple
- ELL-G and HLL (hacked ELLPACK)
- DIA and HDIA (hacked diagonal)
- hybrids: short rows in ELL-G or HLL, long rows in CSR

Row and column numbers and offsets into value arrays are 1-based throughout,
as in the Matrix Market format. Plain Python lists hold all data; there are
no third-party dependencies.

## Installation

```
pip install .
```

## Modules

- `sparsefmt.mmio` – low-level Matrix Market routines: `MMTypecode`
  (with `is_valid()` and `to_str()`), `read_banner`, `read_crd_size`,
  `read_array_size`, `read_crd_entry`, `read_crd_data`, `write_banner`,
  `write_crd_size`, `write_array_size`, `read_mtx_crd`, `write_mtx_crd`
  and `read_unsymmetric_sparse` (0-based indices). Problems with a file are
  raised as `MatrixMarketError`, whose `code` attribute holds one of the
  `MM_*` error codes.
- `sparsefmt.formats` – dataclasses for each layout (`COOMatrix`,
  `DenseMatrix`, `CSRMatrix`, `JADMatrix`, `ELLGMatrix`, `HLLMatrix`,
  `DIAMatrix`, `HDIAMatrix`, `HybELLGMatrix`, `HybHLLMatrix`) and
  `FormatConfig`, the sizes that shape the padded formats.
- `sparsefmt.coo` – `read_matrix_market_coo` (square, real, coordinate files
  only; symmetric files are expanded), `write_coo_matrix_market`,
  `coo_to_dense`, `coo_to_csr`.
- `sparsefmt.jad` – `csr_to_jad`, `pad_jad_warp`, `dcsort`.
- `sparsefmt.ell` – `csr_to_ellg`, `csr_to_hll`, `split_hybrid`,
  `csr_to_hybellg`, `csr_to_hybhll`, `transpose_ellg`.
- `sparsefmt.dia` – `csr_to_dia`, `csr_to_hdia`, `infdia`, `hinfdia`,
  `transpose_dia`.
- `sparsefmt.generate` – random matrices: `generate_gauss_row`,
  `generate_gauss_col`, `generate_gauss_full`, `generate_imbalanced_row`,
  `generate_imbalanced_col`.

## Usage

```python
from sparsefmt.coo import read_matrix_market_coo, coo_to_csr
from sparsefmt.formats import FormatConfig
from sparsefmt.jad import csr_to_jad
from sparsefmt.ell import csr_to_ellg, csr_to_hybhll, RowTooLongError
from sparsefmt.dia import csr_to_dia, TooManyDiagonalsError

coo = read_matrix_market_coo("matrix.mtx")
csr = coo_to_csr(coo)

config = FormatConfig(
    warp_size=32,
    max_ellg=64,
    max_hll=64,
    hll_hacksize=32,
    max_diag=64,
    max_hdiag=64,
    hdia_hacksize=32,
    ell_row_max=64,
)
jad = csr_to_jad(csr, config)

try:
    ellg = csr_to_ellg(csr, config)
except RowTooLongError as exc:
    ellg = exc.matrix          # converted, with the excess entries dropped
    print("longest row:", exc.longest)

try:
    dia = csr_to_dia(csr, config)
except TooManyDiagonalsError as exc:
    print("occupied diagonals:", exc.count)

hyb = csr_to_hybhll(csr, config)
```

Every conversion takes a `log` flag; when true it prints the resulting arrays
to standard output. The hybrid conversions always print a two-line summary of
how the entries were split.

`FormatConfig` has no defaults: every size must be given and must be a
positive integer.

### Random matrices

```python
import random
from sparsefmt.generate import generate_gauss_row
from sparsefmt.coo import write_coo_matrix_market

coo = generate_gauss_row(64, 8.0, 2.0, flip=False, zigzag=False, rng=random.Random(1))
write_coo_matrix_market(coo, "random.mtx")
```

Pass a seeded `random.Random` for repeatable output; without one a fresh
generator is used.

## What it does not do

The package builds the storage layouts but does not multiply with them: it
has no matrix–vector kernels, no device or GPU code, no timing or benchmark
harness, and no command-line program.

## Running the tests

```
pip install .[test]
pytest
```