"""
Shape Matcher Service

Geometric comparison of drawings: normalization into a unit frame,
point-set path similarity, and constraint box adherence.

This is pure mathematics - no external dependencies except numpy.
"""

import math
from typing import Optional, Tuple

import numpy as np

from ..domain.drawing import BoxSize, Drawing, Point, Stroke


class ShapeMatcher:
    """
    Compares the shape of an attempt against an example drawing.

    Path similarity works on normalized drawings so that position and size
    on the capture surface don't matter; constraint adherence works on the
    raw attempt because the constraint box lives in surface pixels.

    Usage:
        matcher = ShapeMatcher()
        similarity = matcher.path_similarity(
            matcher.normalize(example),
            matcher.normalize(attempt),
        )
        adherence = matcher.constraint_adherence(attempt, BoxSize(200, 200))
    """

    DEFAULT_PATH_DECAY = 5.0

    # Candidate points per distance block; bounds memory to CHUNK_ROWS x M pairs
    CHUNK_ROWS = 512

    def __init__(self, path_decay: float = DEFAULT_PATH_DECAY):
        """
        Args:
            path_decay: How fast similarity falls off with average distance.
                        Distances are in normalized units (1.0 = drawing size).
        """
        self.path_decay = path_decay

    # -------------------------------------------------------------------------
    # Normalization
    # -------------------------------------------------------------------------

    @staticmethod
    def bounding_box(drawing: Drawing) -> Optional[Tuple[float, float, float, float]]:
        """
        Get the axis-aligned bounds of all points.

        Returns:
            (min_x, min_y, max_x, max_y), or None if the drawing has no points
        """
        points = drawing.all_points()
        if not points:
            return None

        xs = [p.x for p in points]
        ys = [p.y for p in points]
        return min(xs), min(ys), max(xs), max(ys)

    @staticmethod
    def normalize(drawing: Drawing) -> Drawing:
        """
        Rescale a drawing into a canonical unit frame.

        The drawing is moved so its bounding box starts at the origin and
        scaled so its larger side becomes 1.0. If the bounding box has zero
        width or height (single point, perfectly straight stroke) the drawing
        is only translated, never scaled.

        Returns:
            A new Drawing; the input is left untouched
        """
        bounds = ShapeMatcher.bounding_box(drawing)
        if bounds is None:
            return Drawing(
                strokes=[],
                total_time=drawing.total_time,
                width=drawing.width,
                height=drawing.height,
                created=drawing.created,
            )

        min_x, min_y, max_x, max_y = bounds
        box_width = max_x - min_x
        box_height = max_y - min_y

        if box_width > 0 and box_height > 0:
            scale = min(1 / box_width, 1 / box_height)
        else:
            scale = 1.0

        strokes = [
            Stroke(
                id=stroke.id,
                points=[
                    Point(
                        x=(p.x - min_x) * scale,
                        y=(p.y - min_y) * scale,
                        timestamp=p.timestamp,
                        pressure=p.pressure,
                    )
                    for p in stroke.points
                ],
                start_time=stroke.start_time,
                end_time=stroke.end_time,
                color=stroke.color,
                width=stroke.width,
            )
            for stroke in drawing.strokes
        ]

        return Drawing(
            strokes=strokes,
            total_time=drawing.total_time,
            width=1,
            # Keep the aspect ratio; a zero-width drawing keeps its raw height
            height=box_height / box_width if box_width > 0 else box_height * scale,
            created=drawing.created,
        )

    # -------------------------------------------------------------------------
    # Path Similarity
    # -------------------------------------------------------------------------

    def path_similarity(self, reference: Drawing, candidate: Drawing) -> float:
        """
        Estimate how closely candidate's shape matches reference's.

        For every candidate point, the distance to the nearest reference
        point is found; the average of those distances is turned into a
        similarity with exponential decay. The metric is asymmetric: extra
        reference detail the candidate never drew is not penalized.

        Both drawings should already be normalized.

        Returns:
            Similarity from 0.0 (no match) to 1.0 (every point on the reference)
        """
        if reference.is_empty or candidate.is_empty:
            return 0.0

        reference_xy = self._as_array(reference)
        candidate_xy = self._as_array(candidate)
        if len(reference_xy) == 0 or len(candidate_xy) == 0:
            return 0.0

        # (candidate, reference) pairwise distances, a block of rows at a time
        nearest = np.empty(len(candidate_xy))
        for start in range(0, len(candidate_xy), self.CHUNK_ROWS):
            block = candidate_xy[start:start + self.CHUNK_ROWS]
            deltas = block[:, np.newaxis, :] - reference_xy[np.newaxis, :, :]
            nearest[start:start + len(block)] = np.sqrt((deltas ** 2).sum(axis=2)).min(axis=1)
        avg_distance = float(nearest.mean())

        similarity = math.exp(-avg_distance * self.path_decay)
        return similarity if math.isfinite(similarity) else 0.0

    # -------------------------------------------------------------------------
    # Constraint Adherence
    # -------------------------------------------------------------------------

    @staticmethod
    def constraint_adherence(drawing: Drawing, box: Optional[BoxSize] = None) -> float:
        """
        Fraction of points inside a constraint box.

        The box is centered on the drawing's capture surface. Points on the
        box edge count as inside.

        Args:
            drawing: Raw (not normalized) attempt
            box: Constraint box size, None means unconstrained

        Returns:
            1.0 when every point is inside (or there is no box / no points)
        """
        if box is None:
            return 1.0

        points = ShapeMatcher._as_array(drawing)
        if len(points) == 0:
            return 1.0

        center_x = drawing.width / 2
        center_y = drawing.height / 2
        half_w = box.width / 2
        half_h = box.height / 2

        outside = (
            (points[:, 0] < center_x - half_w) |
            (points[:, 0] > center_x + half_w) |
            (points[:, 1] < center_y - half_h) |
            (points[:, 1] > center_y + half_h)
        )

        return 1.0 - float(np.count_nonzero(outside)) / len(points)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _as_array(drawing: Drawing) -> np.ndarray:
        """All points as an (N, 2) float array."""
        points = drawing.all_points()
        if not points:
            return np.empty((0, 2), dtype=float)
        return np.array([(p.x, p.y) for p in points], dtype=float)
