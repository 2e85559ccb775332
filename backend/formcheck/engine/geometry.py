"""Planar joint-angle geometry."""

import numpy as np


def angle_between(a, b, c) -> float:
    """
    Calculate the angle at vertex b formed by points a, b, c.

    Points only need x and y attributes. The result is a magnitude in
    [0, 180] degrees regardless of rotation direction. Missing or degenerate
    points must be filtered out by the caller.

    Args:
        a: First point
        b: Middle point (vertex)
        c: Third point

    Returns:
        Angle in degrees
    """
    radians = np.arctan2(c.y - b.y, c.x - b.x) - np.arctan2(a.y - b.y, a.x - b.x)
    angle = np.abs(np.degrees(radians))
    if angle > 180.0:
        angle = 360.0 - angle
    return float(angle)
