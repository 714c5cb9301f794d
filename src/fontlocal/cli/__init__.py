"""Command-line interface for fontlocal."""
