"""Command-line interface for hfsnext."""
