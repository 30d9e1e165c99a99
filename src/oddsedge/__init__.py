"""Odds aggregation and positive-EV engine."""

__version__ = "0.1.0"
