"""wikirefs: keep markdown link-reference blocks in sync with wikilinks."""

__version__ = "0.3.0"
