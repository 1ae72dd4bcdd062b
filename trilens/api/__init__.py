"""
API Layer

FastAPI integration surface. Import ``app`` from ``trilens.api.server``.
"""
