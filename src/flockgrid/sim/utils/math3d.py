from __future__ import annotations

import math

from pygame.math import Vector3


def _planar(vector: Vector3) -> Vector3:
    return Vector3(vector.x, 0.0, vector.z)


def _clamp_length(vector: Vector3, max_length: float) -> Vector3:
    if max_length <= 0:
        return Vector3()
    magnitude_sq = vector.length_squared()
    if magnitude_sq <= max_length * max_length:
        return Vector3(vector)
    return vector * (max_length / math.sqrt(magnitude_sq))


def _heading_from_velocity(vector: Vector3) -> float:
    if vector.x * vector.x + vector.z * vector.z < 1e-12:
        return 0.0
    return math.atan2(vector.x, vector.z)


def _wrap_angle(angle: float) -> float:
    return (angle + math.pi) % (2.0 * math.pi) - math.pi


def _clamp_value(value: float, min_value: float, max_value: float) -> float:
    return max(min_value, min(max_value, value))
