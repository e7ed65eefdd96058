"""HTTP API for the corridor simulation and live overlay.

Run with ``uvicorn --factory corridor_sim.web.app:create_app``.
"""
