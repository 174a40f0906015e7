"""botbridge -- Bot Framework activities in, channel-agnostic bus events out."""

__version__ = "0.1.0"
