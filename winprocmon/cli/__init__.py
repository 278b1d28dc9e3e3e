"""Command-line interface for the Windows process monitor."""
