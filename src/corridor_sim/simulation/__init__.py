"""Simulation clock, periodic tasks and the owning simulation context."""
