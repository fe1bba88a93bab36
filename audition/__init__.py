"""
Audition scoring server: live judge scoring and Olympic-average rankings
"""

__version__ = "1.0.0"
