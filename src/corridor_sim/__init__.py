"""Scripted and live train position overlays for a multi-track rail corridor."""

__version__ = "0.1.0"
