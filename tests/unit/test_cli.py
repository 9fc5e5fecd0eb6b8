"""Unit tests for anime4k/cli.py"""
import unittest
import sys
import os
import argparse
from PIL import Image

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from tests.base_test import BaseTestCase
from anime4k.cli import build_parser, config_from_args, main, parse_resolution
from anime4k.core.errors import InvalidConfiguration
from anime4k.core.pipeline import AlgorithmVersion


class TestArguments(unittest.TestCase):
    def test_parse_resolution(self):
        self.assertEqual(parse_resolution("1920x1080"), (1920, 1080))
        self.assertEqual(parse_resolution("64X48"), (64, 48))
        for bad in ("1920", "axb", "1x2x3"):
            with self.assertRaises(argparse.ArgumentTypeError):
                parse_resolution(bad)

    def test_config_from_args(self):
        args = build_parser().parse_args(
            ["-i", "in.png", "-s", "3", "-p", "2", "-sc", "0.2", "-sg", "0.8", "-v", "v1.0-rc2", "--fxaa", "-q"]
        )
        config = config_from_args(args)
        self.assertEqual(config.version, AlgorithmVersion.V10_RC2)
        self.assertEqual(config.scale_factor, 3.0)
        self.assertEqual(config.passes, 2)
        self.assertEqual(config.strength_color, 0.2)
        self.assertEqual(config.strength_gradient, 0.8)
        self.assertTrue(config.enable_fxaa)
        self.assertFalse(config.verbose)
        self.assertIsNone(config.debug_dir)

    def test_debug_flag_default_dir(self):
        args = build_parser().parse_args(["-i", "in.png", "-d"])
        self.assertEqual(args.debug, "./debug")

    def test_config_from_args_validates(self):
        args = build_parser().parse_args(["-i", "in.png", "--fxaa"])
        with self.assertRaises(InvalidConfiguration):
            config_from_args(args)


class TestMain(BaseTestCase):
    def test_single_image(self):
        src = self.save_sample_image('in.png')
        out = os.path.join(self.temp_directory, 'out.png')
        self.assertEqual(main(["-i", src, "-o", out, "-r", "20x16", "-q"]), 0)
        with Image.open(out) as img:
            self.assertEqual(img.size, (20, 16))

    def test_verbose_run(self):
        src = self.save_sample_image('in.png', self.create_sample_rgb_image(4, 4))
        self.assertEqual(main(["-i", src, "-s", "1", "-v", "rc2"]), 0)
        self.assertTrue(os.path.isfile(os.path.join(self.temp_directory, 'in_anime4k.png')))

    def test_batch_mode(self):
        input_dir = os.path.join(self.temp_directory, 'frames')
        os.makedirs(input_dir)
        self.create_sample_rgb_image(3, 3).save(os.path.join(input_dir, 'f1.png'))
        out_dir = os.path.join(self.temp_directory, 'done')
        self.assertEqual(main(["-i", input_dir, "-o", out_dir, "-q"]), 0)
        self.assertEqual(os.listdir(out_dir), ['f1.png'])

    def test_errors_return_1(self):
        src = self.save_sample_image('in.png')
        self.assertEqual(main(["-i", os.path.join(self.temp_directory, 'missing.png'), "-q"]), 1)
        self.assertEqual(main(["-i", src, "-p", "0", "-q"]), 1)
        self.assertEqual(main(["-i", src, "-v", "v7", "-q"]), 1)
        self.assertEqual(main(["-i", src, "-s", "nan", "-q"]), 1)
        self.assertEqual(main(["-i", src, "-sc", "nan", "-q"]), 1)


if __name__ == '__main__':
    unittest.main()
