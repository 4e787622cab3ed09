"""
Growthlog: longitudinal growth records for children, kept per guardian.
"""

__version__ = "0.1.0"
