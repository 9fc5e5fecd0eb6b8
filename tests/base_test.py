"""Base test classes and utilities for unittest framework."""
import unittest
import tempfile
import os
import shutil
from PIL import Image
import numpy as np

from anime4k.core.frame_transform import ParallelFrameTransform
from anime4k.core.pixel_grid import PixelGrid


class BaseTestCase(unittest.TestCase):
    """Base test case class with common test fixtures."""

    def setUp(self):
        """Set up test fixtures before each test method."""
        super().setUp()
        self._temp_dir = None

    def tearDown(self):
        """Clean up after each test method."""
        super().tearDown()
        if self._temp_dir and os.path.exists(self._temp_dir):
            shutil.rmtree(self._temp_dir, ignore_errors=True)

    @property
    def temp_directory(self):
        """Get a temporary directory for testing."""
        if not self._temp_dir:
            self._temp_dir = tempfile.mkdtemp()
        return self._temp_dir

    def create_sample_rgb_image(self, width=8, height=6, color='red'):
        """Create a sample RGB image for testing."""
        return Image.new('RGB', (width, height), color=color)

    def create_sample_image_with_pattern(self, width=12, height=10):
        """Create a sample image with a specific pattern for testing."""
        img = Image.new('RGB', (width, height))
        pixels = img.load()
        for i in range(width):
            for j in range(height):
                pixels[i, j] = (i * 20 % 256, j * 25 % 256, (i + j) * 10 % 256)
        return img

    def save_sample_image(self, name, image=None):
        """Save an image into the temp directory and return its path."""
        path = os.path.join(self.temp_directory, name)
        (image or self.create_sample_image_with_pattern()).save(path)
        return path


class GridTestCase(BaseTestCase):
    """Test case class for PixelGrid based tests."""

    def setUp(self):
        super().setUp()
        self.serial = ParallelFrameTransform(workers=1)
        self.threaded = ParallelFrameTransform(workers=4, min_band_rows=2)

    def make_grid(self, rows):
        """Grid from nested lists of (r, g, b, a) tuples, row major."""
        return PixelGrid(np.array(rows, dtype=np.uint8))

    def gray_grid(self, values, alpha=255):
        """Grid with R = G = B = value and a fixed alpha from a 2D list."""
        plane = np.array(values, dtype=np.uint8)
        arr = np.empty(plane.shape + (4,), dtype=np.uint8)
        arr[..., 0] = plane
        arr[..., 1] = plane
        arr[..., 2] = plane
        arr[..., 3] = alpha
        return PixelGrid(arr)

    def feature_grid(self, values):
        """Gray grid whose AUX channel also holds the values."""
        plane = np.array(values, dtype=np.uint8)
        return PixelGrid(np.repeat(plane[..., np.newaxis], 4, axis=-1))

    def white_square_grid(self):
        """4×4 black grid with a white 2×2 square at x, y in {1, 2}."""
        arr = np.zeros((4, 4, 4), dtype=np.uint8)
        arr[..., 3] = 255
        arr[1:3, 1:3] = 255
        return PixelGrid(arr)

    def random_grid(self, width=24, height=20, seed=7):
        rng = np.random.RandomState(seed)
        arr = rng.randint(0, 256, (height, width, 4)).astype(np.uint8)
        arr[..., 3] = 255
        return PixelGrid(arr)

    def assertGridEqual(self, first, second):
        self.assertEqual(first.shape, second.shape)
        np.testing.assert_array_equal(first.pixels, second.pixels)
