"""Geometry module for implicit-surface shapes.

This module provides the shapes a scene is built from:

Components:
    shapes: Tagged Shape struct with occupancy and derivative functions

Each shape answers two questions at a point: is it occupied (negative
occupancy), and what are the partial derivatives of the occupancy there.
Nothing else about a shape is visible to the marcher.
"""

from .shapes import (
    DERIVATIVE_EPS,
    Shape,
    ShapeKind,
    box_occupancy,
    occupancy,
    occupancy_dx,
    occupancy_dy,
    occupancy_dz,
    plane_occupancy,
    sphere_occupancy,
    surface_normal,
)

__all__ = [
    "Shape",
    "ShapeKind",
    "DERIVATIVE_EPS",
    "sphere_occupancy",
    "box_occupancy",
    "plane_occupancy",
    "occupancy",
    "occupancy_dx",
    "occupancy_dy",
    "occupancy_dz",
    "surface_normal",
]
