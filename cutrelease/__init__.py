"""Cutrelease - release pull request assistant."""

__version__ = "0.3.0"
