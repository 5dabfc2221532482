"""
puttlab: putting green simulation (terrain, ball physics, hint line, aim zone).
"""

__version__ = "0.1.0"
