"""
Command-line interface for obsplanner.
"""
