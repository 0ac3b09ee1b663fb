"""Command-line front ends for the Claude Agent SDK."""

__version__ = "0.1.0"
