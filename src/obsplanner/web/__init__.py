"""
HTTP surface for obsplanner.
"""
