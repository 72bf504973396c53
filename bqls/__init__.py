"""Building blocks for a BigQuery SQL language server: protocol structures, diffs, diagnostics, export and a metadata cache."""

__version__ = "0.1.0"