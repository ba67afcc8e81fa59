"""
Domain layer: persisted entities, block type taxonomy, network aliases.
"""
