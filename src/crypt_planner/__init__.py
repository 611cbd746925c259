"""Anytime reward planner for the Barrows crypts."""

__version__ = "0.1.0"
