"""Command-line interface for mediactl."""
