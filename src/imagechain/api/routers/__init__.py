"""
API routers for imagechain
"""
