[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sparsefmt"
version = "0.1.0"
description = "Matrix Market I/O, random sparse matrices and conversions between sparse storage formats (COO, CSR, JAD, ELL-G, HLL, DIA, HDIA, hybrid)"
requires-python = ">=3.10"
dependencies = []
keywords = ["sparse", "matrix", "matrix-market", "csr", "ellpack", "jagged-diagonal", "spmv"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["sparsefmt"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
