"""WanderGo command-line client."""

from wandergo.cli.app import app

__all__ = ["app"]
