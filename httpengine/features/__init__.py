"""
Optional server features: response compression and metrics
"""
