"""Football draft auction core: formations, slot assignment and budgeted drafting."""

__version__ = "0.1.0"
