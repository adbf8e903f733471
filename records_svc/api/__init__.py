"""
HTTP API layer: FastAPI routers exposing the record service.
"""
