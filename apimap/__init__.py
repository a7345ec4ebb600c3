"""Namespace API registry extraction for TypeScript declaration files."""

__version__ = "0.1.0"
