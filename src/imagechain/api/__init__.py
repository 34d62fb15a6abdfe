"""
HTTP API for imagechain: dependencies, exception handlers and routers.
"""
