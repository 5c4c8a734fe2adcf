"""Building blocks for rendering LaTeX articles to HTML."""

__version__ = "0.1.0"