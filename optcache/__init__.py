"""optcache: post-processing for cached compiler-optimization records."""

__version__ = "0.1.0"
