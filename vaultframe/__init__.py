"""vaultframe - typed data frames and pluggable views over a note vault."""

__version__ = "0.1.0"
