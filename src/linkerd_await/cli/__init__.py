"""Command-line entry point for linkerd-await."""

from ._app import create_app, main

__all__ = ["create_app", "main"]
