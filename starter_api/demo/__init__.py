"""
Demo Package
============

Home, external API demo and health routes, plus the optional self-ping.

Usage:
------
    from starter_api.demo import demo_router
    app.include_router(demo_router)
"""

from .routes import demo_router, keep_alive, ping_self

__all__ = ["demo_router", "keep_alive", "ping_self"]
