"""Unit tests for anime4k/core/pipeline.py and anime4k/core/fxaa.py"""
import unittest
import sys
import os
import numpy as np

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from tests.base_test import GridTestCase
from anime4k.core.errors import DimensionMismatch, InvalidConfiguration
from anime4k.core.feature_stages import build_data_grid
from anime4k.core.fxaa import apply_fxaa
from anime4k.core.pipeline import (
    AlgorithmVersion,
    Anime4K09,
    Anime4K10RC2,
    create_pipeline,
    validate_run_parameters,
)
from anime4k.core.pixel_grid import AUX, LINE, PixelGrid


class PhaseRecorder:
    def __init__(self):
        self.phases = []

    def __call__(self, pass_index, name, grid, is_data):
        self.phases.append((pass_index, name, grid, is_data))

    def grid(self, name, pass_index=0):
        for p, n, g, _ in self.phases:
            if p == pass_index and n == name:
                return g
        raise KeyError(name)


class TestAlgorithmVersion(unittest.TestCase):
    def test_parse(self):
        self.assertIs(AlgorithmVersion.parse("v0.9"), AlgorithmVersion.V09)
        self.assertIs(AlgorithmVersion.parse("V09"), AlgorithmVersion.V09)
        self.assertIs(AlgorithmVersion.parse("v1.0-rc2"), AlgorithmVersion.V10_RC2)
        self.assertIs(AlgorithmVersion.parse("v10rc2"), AlgorithmVersion.V10_RC2)
        self.assertIs(AlgorithmVersion.parse(AlgorithmVersion.V10_RC2), AlgorithmVersion.V10_RC2)
        with self.assertRaises(InvalidConfiguration):
            AlgorithmVersion.parse("v2.0")

    def test_create_pipeline(self):
        self.assertIsInstance(create_pipeline("v0.9", verbose=False), Anime4K09)
        pipeline = create_pipeline("v1.0-rc2", verbose=False, enable_fxaa=True)
        self.assertIsInstance(pipeline, Anime4K10RC2)
        self.assertTrue(pipeline.enable_fxaa)
        with self.assertRaises(InvalidConfiguration):
            create_pipeline("v0.9", enable_fxaa=True)


class TestRunParameters(GridTestCase):
    def test_invalid_parameters(self):
        for passes in (0, -1, 1.5, True):
            with self.assertRaises(InvalidConfiguration):
                validate_run_parameters(passes, 0.3, 0.9)
        with self.assertRaises(InvalidConfiguration):
            validate_run_parameters(1, -0.1, 0.9)
        with self.assertRaises(InvalidConfiguration):
            validate_run_parameters(1, 0.1, -0.9)

    def test_non_finite_strengths(self):
        nan, inf = float('nan'), float('inf')
        for color, gradient in [(nan, 0.9), (0.3, nan), (inf, 0.9), (0.3, inf), (np.float64(nan), 0.9)]:
            with self.assertRaises(InvalidConfiguration):
                validate_run_parameters(1, color, gradient)
        validate_run_parameters(1, np.float32(0.5), 2)

    def test_run_validates_before_work(self):
        recorder = PhaseRecorder()
        grid = self.random_grid(4, 4)
        for pipeline in (Anime4K09(self.serial, recorder, verbose=False),
                         Anime4K10RC2(self.serial, recorder, verbose=False)):
            with self.assertRaises(InvalidConfiguration):
                pipeline.run(grid, passes=0)
            with self.assertRaises(InvalidConfiguration):
                pipeline.run(grid, 1, float('nan'), float('nan'))
        self.assertEqual(recorder.phases, [])


class TestAnime4K09(GridTestCase):
    def test_white_square_scenario(self):
        recorder = PhaseRecorder()
        grid = self.white_square_grid()
        out = Anime4K09(self.serial, recorder, verbose=False).run(grid, 1, 1.0 / 6.0, 0.5)

        self.assertEqual([n for _, n, _, _ in recorder.phases],
                         ["1_get-lum", "2_push-col", "3_get-grad", "4_push-grad"])

        luma = recorder.grid("1_get-lum").channel(AUX)
        expected = np.zeros((4, 4), dtype=np.uint8)
        expected[1:3, 1:3] = 255
        np.testing.assert_array_equal(luma, expected)

        # the square's cells see the black/white boundary: inverted gradient 0
        gradient = recorder.grid("3_get-grad").channel(AUX)
        np.testing.assert_array_equal(gradient[1:3, 1:3], np.zeros((2, 2)))

        self.assertTrue(np.all(out.channel(AUX) == 255))
        np.testing.assert_array_equal(out.pixels[..., :3], grid.pixels[..., :3])

    def test_flat_image_unchanged(self):
        grid = PixelGrid.filled(9, 7, (120, 60, 200, 255))
        out = Anime4K09(self.threaded, verbose=False).run(grid, passes=3, strength_color=1.0, strength_gradient=1.0)
        self.assertGridEqual(out, grid)

    def test_dimensions_and_determinism(self):
        grid = self.random_grid(13, 21)
        first = Anime4K09(self.serial, verbose=False).run(grid, passes=2)
        second = Anime4K09(self.threaded, verbose=False).run(grid, passes=2)
        self.assertEqual(first.shape, grid.shape)
        self.assertGridEqual(first, second)

    def test_input_not_modified(self):
        grid = self.random_grid(8, 8)
        before = grid.copy_array()
        Anime4K09(self.serial, verbose=False).run(grid)
        np.testing.assert_array_equal(grid.pixels, before)


class TestAnime4K10RC2(GridTestCase):
    def test_phase_order(self):
        recorder = PhaseRecorder()
        Anime4K10RC2(self.serial, recorder, verbose=False).run(self.random_grid(6, 6), passes=2)
        names = [n for p, n, _, _ in recorder.phases if p == 1]
        self.assertEqual(names, ["1_data_line-det-no-gauss", "2_data_line-gauss",
                                 "3_img_push-thin-lines", "4_img_push-lines", "6_img_reset-alpha"])
        self.assertTrue(recorder.phases[0][3])
        self.assertFalse(recorder.phases[2][3])

    def test_flat_image_unchanged(self):
        for color in [(0, 0, 0, 255), (30, 90, 60, 255), (250, 250, 250, 255)]:
            grid = PixelGrid.filled(8, 10, color)
            out = Anime4K10RC2(self.threaded, verbose=False).run(grid, passes=2, strength_color=1.0, strength_gradient=1.0)
            self.assertGridEqual(out, grid)

    def test_dimensions_and_determinism(self):
        grid = self.random_grid(15, 18)
        first = Anime4K10RC2(self.serial, verbose=False).run(grid, 2, 0.33, 1.0)
        second = Anime4K10RC2(self.threaded, verbose=False).run(grid, 2, 0.33, 1.0)
        self.assertEqual(first.shape, grid.shape)
        self.assertGridEqual(first, second)
        self.assertTrue(np.all(first.channel(AUX) == 255))

    def test_fxaa_phase(self):
        recorder = PhaseRecorder()
        out = Anime4K10RC2(self.serial, recorder, verbose=False, enable_fxaa=True).run(self.random_grid(9, 9))
        self.assertIn("5_img_fxaa", [n for _, n, _, _ in recorder.phases])
        self.assertEqual(out.shape, (9, 9, 4))


class TestFXAA(GridTestCase):
    def test_gated_pixels_unchanged(self):
        image = self.random_grid(10, 8)
        data = build_data_grid(image, self.serial).with_channel(LINE, np.full((8, 10), 14))
        out = apply_fxaa(image, data, 1.0, self.serial)
        self.assertGridEqual(out, image)

    def test_threaded_matches_serial(self):
        image = self.random_grid(12, 20)
        data = build_data_grid(image, self.serial).with_channel(LINE, np.full((20, 12), 255))
        self.assertGridEqual(apply_fxaa(image, data, 0.5, self.serial), apply_fxaa(image, data, 0.5, self.threaded))

    def test_shape_mismatch(self):
        image = self.random_grid(4, 4)
        with self.assertRaises(DimensionMismatch):
            apply_fxaa(image, self.random_grid(5, 4), 1.0, self.serial)


if __name__ == '__main__':
    unittest.main()
