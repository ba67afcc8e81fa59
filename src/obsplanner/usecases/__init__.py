"""
Application use cases.

CLI commands and HTTP routes call functions from here; each takes a
SQLAlchemy ``Session`` (or the event store) and returns plain dicts.
"""
