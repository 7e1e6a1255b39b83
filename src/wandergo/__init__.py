"""WanderGo - offline-first travel discovery client."""

__version__ = "0.1.0"
