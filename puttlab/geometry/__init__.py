from .aim_zone import AimPointSet, AimZone, BoundingEllipse, bounding_ellipse, convex_hull

__all__ = [
    "AimPointSet",
    "AimZone",
    "BoundingEllipse",
    "bounding_ellipse",
    "convex_hull",
]
