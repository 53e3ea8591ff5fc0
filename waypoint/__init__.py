"""waypoint - site-scoped URL redirects and cached sitemaps."""

__version__ = "0.1.0"
