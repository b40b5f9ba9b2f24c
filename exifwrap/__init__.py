"""Read and write file metadata through a persistent exiftool process."""

__version__ = "0.1.0"

__all__ = ["metadata", "process"]