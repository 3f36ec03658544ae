"""
Contact manager backend.

This package provides a FastAPI application with per-user contact storage,
activity logging, photo intake, CSV export and a WebSocket channel that
pushes contact changes to every session of the owning user.
"""
