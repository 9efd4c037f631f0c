import unittest

from planextract.services.geometry import (
    Point,
    angle_between,
    line_angle,
    midpoint,
    point_in_polygon,
    point_to_segment_distance,
)
from planextract.services.hough import LineCandidate


class TestGeometry(unittest.TestCase):

    def test_line_angle(self):
        self.assertAlmostEqual(line_angle(LineCandidate(0, 0, 10, 0)), 0)
        self.assertAlmostEqual(line_angle(LineCandidate(0, 0, 0, 10)), 90)
        self.assertAlmostEqual(line_angle(LineCandidate(10, 0, 0, 0)), 180)

    def test_angle_between(self):
        horizontal = LineCandidate(0, 0, 10, 0)
        self.assertAlmostEqual(angle_between(horizontal, LineCandidate(0, 0, 0, 10)), 90)
        self.assertAlmostEqual(angle_between(horizontal, LineCandidate(10, 5, 0, 5)), 180)
        # Wraps around instead of reporting 358 degrees
        self.assertAlmostEqual(
            angle_between(LineCandidate(0, 0, -10, 0.1745), LineCandidate(0, 0, -10, -0.1745)),
            2,
            places=1
        )

    def test_midpoint(self):
        self.assertEqual(midpoint(LineCandidate(0, 2, 10, 4)), Point(5, 3))

    def test_point_to_segment_distance(self):
        segment = LineCandidate(0, 0, 10, 0)
        self.assertEqual(point_to_segment_distance(Point(5, 3), segment), 3)
        # Projection beyond the end clamps to the endpoint
        self.assertEqual(point_to_segment_distance(Point(13, 4), segment), 5)
        self.assertEqual(point_to_segment_distance(Point(3, 4), LineCandidate(0, 0, 0, 0)), 5)

    def test_point_in_polygon(self):
        square = [Point(0, 0), Point(10, 0), Point(10, 10), Point(0, 10)]
        self.assertTrue(point_in_polygon(Point(5, 5), square))
        self.assertFalse(point_in_polygon(Point(15, 5), square))
        self.assertFalse(point_in_polygon(Point(-1, -1), square))


if __name__ == '__main__':
    unittest.main()
