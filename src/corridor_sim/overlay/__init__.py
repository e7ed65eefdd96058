"""Overlay synchronisation onto map and schematic surfaces."""
