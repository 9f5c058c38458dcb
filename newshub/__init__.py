"""AI News Hub - automated news ingestion, summarisation and daily digests."""

__version__ = "0.1.0"
