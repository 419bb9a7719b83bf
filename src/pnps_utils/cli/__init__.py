"""Command line interface for pnps-utils."""
