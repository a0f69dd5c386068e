"""venuecrawl — breadth-first crawler for rate-limited adjacency APIs."""

__version__ = "0.1.0"
