"""
REST API routers.
"""
