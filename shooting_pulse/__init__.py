"""
Shooting Pulse

Temporal report on NYPD shooting incidents: download, clean, bucket by year,
month, weekday and hour, and render charts with narrative conclusions.
"""

__version__ = "0.1.0"
