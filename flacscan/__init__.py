"""Read FLAC stream metadata and decode FLAC subframes."""

__version__ = "0.4.3"
__all__ = ["metadata", "prediction", "subframe", "reader"]