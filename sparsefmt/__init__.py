"""Matrix Market I/O, random sparse matrices and sparse storage format conversions."""

__version__ = "0.1.0"

__all__ = ["coo", "dia", "ell", "formats", "generate", "jad", "mmio"]