"""Local dashboard server for running project scripts."""

__version__ = "0.3.0"
