"""
Tools: heightfield export and matplotlib rendering.
"""

__all__ = [
    "export_heightfield",
    "plot_green",
]
