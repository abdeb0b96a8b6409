"""
Starter API

A starter HTTP backend: FastAPI routing, request logging, CORS, OpenAPI
docs, session-based Facebook login, a demo outbound call, a health check
and generic 404/500 handlers.
"""

__version__ = "1.0.0"
