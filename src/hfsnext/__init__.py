"""hfsnext - data-fetching layer for HFS exam results."""

__version__ = "0.1.0"
