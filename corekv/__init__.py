"""Components for a log-structured key-value store: codecs, skip list, bloom filters and cache."""

__version__ = "0.1.0"