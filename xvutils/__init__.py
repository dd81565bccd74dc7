"""Command-line tools, an image builder, a shell parser and data formats of a small teaching operating system."""

__version__ = "0.1.0"