"""pnps-utils: per-sample pN/pS statistics for annotated coding regions."""

__version__ = "0.1.0"
