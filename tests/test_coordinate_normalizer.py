import os
import unittest
from unittest.mock import patch

from track3d.utils.coordinate_normalizer import (
    NormalizerConfig,
    compute_envelope,
    compute_offsets,
    normalize,
    normalize_segments,
)
from track3d.utils.track_models import NormalizedPoint, Track, Waypoint


def make_track(*segments):
    segments = [[Waypoint(*point) for point in segment] for segment in segments]
    return Track(segments=segments, is_valid=any(segments))


class EnvelopeTests(unittest.TestCase):
    def test_envelope_spans_all_segments(self):
        track = make_track([(10, 20, 100.0)], [(12, 24, 600.0), (11, 19, 300.0)])
        envelope = compute_envelope(track)
        self.assertEqual(
            envelope.to_dict(),
            {
                'min_lat': 10.0, 'max_lat': 12.0,
                'min_lon': 19.0, 'max_lon': 24.0,
                'min_ele': 100.0, 'max_ele': 600.0,
            },
        )

    def test_missing_elevation_counts_as_zero(self):
        track = make_track([(10, 20, 150.0), (11, 21, None), (12, 22, 400.0)])
        envelope = compute_envelope(track)
        self.assertEqual(envelope.min_ele, 0.0)
        self.assertEqual(envelope.max_ele, 400.0)

    def test_missing_elevation_raises_max_for_negative_tracks(self):
        track = make_track([(10, 20, -30.0), (11, 21, None)])
        envelope = compute_envelope(track)
        self.assertEqual(envelope.min_ele, -30.0)
        self.assertEqual(envelope.max_ele, 0.0)

    def test_no_waypoints_has_no_envelope(self):
        self.assertIsNone(compute_envelope(Track()))
        self.assertIsNone(compute_envelope(make_track([], [])))

    def test_offsets_use_max_minus_half_range(self):
        track = make_track([(0.1, 0.7), (0.3, 0.2)])
        envelope = compute_envelope(track)
        offset_lat, offset_lon = compute_offsets(envelope)
        self.assertEqual(offset_lat, 0.3 - ((0.3 - 0.1) / 2))
        self.assertEqual(offset_lon, 0.7 - ((0.7 - 0.2) / 2))


class NormalizeTests(unittest.TestCase):
    def test_concrete_flat_scenario(self):
        track = make_track([(10, 20), (12, 24)])
        envelope = compute_envelope(track)
        self.assertEqual(envelope.to_bounds(), {'north': 12.0, 'south': 10.0, 'east': 24.0, 'west': 20.0})
        self.assertEqual((envelope.min_ele, envelope.max_ele), (0.0, 0.0))
        self.assertEqual(compute_offsets(envelope), (11.0, 22.0))

        result = normalize(track, NormalizerConfig(elevation_mode='flat', scale_factor=100))
        self.assertEqual(
            result,
            [
                (0, NormalizedPoint(x=-100.0, y=0.0, z=-200.0)),
                (0, NormalizedPoint(x=100.0, y=0.0, z=200.0)),
            ],
        )

    def test_default_config_is_flat_with_scale_100(self):
        config = NormalizerConfig()
        self.assertEqual(config.to_dict(), {
            'elevation_mode': 'flat',
            'elevation_divisor': 5000.0,
            'scale_factor': 100.0,
        })
        result = normalize(make_track([(10, 20), (12, 24)]))
        self.assertEqual(result[0][1], NormalizedPoint(-100.0, 0.0, -200.0))

    def test_point_count_and_order_preserved(self):
        track = make_track([(1, 1), (2, 2)], [], [(3, 3), (4, 4), (5, 5)])
        result = normalize(track, NormalizerConfig(scale_factor=1))
        self.assertEqual(len(result), 5)
        self.assertEqual([index for index, _ in result], [0, 0, 2, 2, 2])
        self.assertEqual([point.x for _, point in result], [-2.0, -1.0, 0.0, 1.0, 2.0])

    def test_flat_mode_ignores_elevation(self):
        track = make_track([(1, 1, 100.0), (2, 2, 9000.0), (3, 3, None)])
        result = normalize(track, NormalizerConfig(elevation_mode='flat'))
        self.assertTrue(all(point.y == 0 for _, point in result))

    def test_elevation_scaled_mode(self):
        track = make_track([(1, 1, 100.0), (2, 2, 600.0), (3, 3, 350.0)])
        config = NormalizerConfig(elevation_mode='elevation_scaled', scale_factor=1)
        ys = [point.y for _, point in normalize(track, config)]
        self.assertEqual(ys[0], 0.0)
        self.assertAlmostEqual(ys[1], 0.1)
        self.assertAlmostEqual(ys[2], 0.05)

    def test_elevation_scaled_mode_applies_scale_and_divisor(self):
        track = make_track([(1, 1, 100.0), (2, 2, 600.0)])
        config = NormalizerConfig(elevation_mode='elevation_scaled', elevation_divisor=50, scale_factor=100)
        ys = [point.y for _, point in normalize(track, config)]
        self.assertAlmostEqual(ys[1], 1000.0)

    def test_elevation_scaled_missing_elevation_uses_zero(self):
        track = make_track([(1, 1, None), (2, 2, 500.0)])
        config = NormalizerConfig(elevation_mode='elevation_scaled', scale_factor=1)
        ys = [point.y for _, point in normalize(track, config)]
        self.assertEqual(ys[0], 0.0)
        self.assertAlmostEqual(ys[1], 0.1)

    def test_centering_with_unit_scale(self):
        track = make_track([(47.1234, 8.5432), (47.2001, 8.6012)], [(47.1500, 8.4999)])
        result = normalize(track, NormalizerConfig(scale_factor=1))
        xs = [point.x for _, point in result]
        zs = [point.z for _, point in result]
        for values in (xs, zs):
            self.assertAlmostEqual(max(values) - ((max(values) - min(values)) / 2 + min(values)), 0.0, places=12)
            self.assertAlmostEqual(max(values), -min(values), places=12)

    def test_identical_points_collapse_to_origin(self):
        track = make_track([(5, 5, 10.0), (5, 5, 10.0)], [(5, 5, 10.0)])
        for mode in ('flat', 'elevation_scaled'):
            result = normalize(track, NormalizerConfig(elevation_mode=mode))
            self.assertEqual([point for _, point in result], [NormalizedPoint(0.0, 0.0, 0.0)] * 3)

    def test_empty_track_returns_empty_list(self):
        self.assertEqual(normalize(Track()), [])
        self.assertEqual(normalize(make_track([], [])), [])

    def test_idempotent(self):
        track = make_track([(47.1, 8.3, 400.5), (47.3, 8.9, 410.25)], [(47.2, 8.1, None)])
        config = NormalizerConfig(elevation_mode='elevation_scaled', elevation_divisor=1234.5, scale_factor=77)
        self.assertEqual(normalize(track, config), normalize(track, config))

    def test_input_track_is_not_modified(self):
        track = make_track([(1, 2, None)], [])
        before = [list(segment) for segment in track.segments]
        normalize(track, NormalizerConfig(elevation_mode='elevation_scaled'))
        self.assertEqual(track.segments, before)
        self.assertIsNone(track.segments[0][0].elevation)

    def test_normalize_segments_keeps_empty_segments(self):
        track = make_track([], [(1, 1), (3, 3)], [])
        grouped = normalize_segments(track, NormalizerConfig(scale_factor=1))
        self.assertEqual(len(grouped), 3)
        self.assertEqual(grouped[0], [])
        self.assertEqual(grouped[1], [NormalizedPoint(-1.0, 0.0, -1.0), NormalizedPoint(1.0, 0.0, 1.0)])
        self.assertEqual(grouped[2], [])


class NormalizerConfigTests(unittest.TestCase):
    def test_invalid_values_raise(self):
        with self.assertRaises(ValueError):
            NormalizerConfig(elevation_mode='sideways')
        with self.assertRaises(ValueError):
            NormalizerConfig(elevation_divisor=0)
        with self.assertRaises(ValueError):
            NormalizerConfig(scale_factor=-1)
        with self.assertRaises(ValueError):
            NormalizerConfig(scale_factor=float('inf'))

    def test_from_options_uses_environment_defaults(self):
        with patch.dict(
            os.environ,
            {
                "TRACK3D_ELEVATION_MODE": "elevation_scaled",
                "TRACK3D_ELEVATION_DIVISOR": "2500",
                "TRACK3D_SCALE_FACTOR": "10",
            },
            clear=False,
        ):
            config = NormalizerConfig.from_options({})
        self.assertEqual(config, NormalizerConfig('elevation_scaled', 2500.0, 10.0))

    def test_from_options_explicit_values_win(self):
        with patch.dict(os.environ, {"TRACK3D_ELEVATION_MODE": "flat"}, clear=False):
            config = NormalizerConfig.from_options({
                'elevation_mode': 'elevationScaled',
                'elevation_divisor': '1000',
                'scale_factor': 2,
            })
        self.assertEqual(config, NormalizerConfig('elevation_scaled', 1000.0, 2.0))

    def test_from_options_rejects_bad_explicit_values(self):
        for options in [
            {'elevation_mode': 'bogus'},
            {'elevation_divisor': 'big'},
            {'scale_factor': 0},
            {'scale_factor': True},
        ]:
            with self.assertRaises(ValueError):
                NormalizerConfig.from_options(options)


if __name__ == "__main__":
    unittest.main()
