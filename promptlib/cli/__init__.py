"""Command-line interface for promptlib."""
