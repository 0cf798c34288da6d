"""matchrank - relevance ranking of football matches for content generation."""

from matchrank.config import VERSION

__version__ = VERSION
