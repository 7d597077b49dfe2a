"""Logo, date stamp and annotation compositing for photo batches."""

__version__ = "0.1.0"
