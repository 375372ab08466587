"""Command line interface for notefeed."""
