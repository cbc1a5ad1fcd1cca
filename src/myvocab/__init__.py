"""myvocab -- vocabulary enrichment through interchangeable AI providers."""

__version__ = "0.4.0"
