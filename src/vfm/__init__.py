"""vfm - upload files to a VTEX account asset store."""

__version__ = "0.1.0"
