"""
obsplanner - broadcast operations timeline planner.

Lays OBS feed events and resource-assignment blocks out on a zoomable
24/36/48 hour timeline, turns pointer drags into time ranges, and keeps the
registries (encoders, booths, commentators, networks...) those blocks use.
"""

__version__ = "0.1.0"
