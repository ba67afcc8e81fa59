"""
Feed ingestion: external schedule exports turned into event records.
"""
