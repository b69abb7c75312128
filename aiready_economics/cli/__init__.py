"""Command-line interface for AIReady unit economics."""
