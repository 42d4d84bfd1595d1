"""Library records in binary files: searching, quicksort, external sorting and a hashed client index."""

__version__ = "0.1.0"