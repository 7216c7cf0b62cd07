"""Command line interface for a6tools."""
