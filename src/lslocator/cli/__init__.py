"""Command-line interface for lslocator."""
