"""
Unit tests for the per-face transforms.

Run with: pytest tests/test_transforms.py -v
"""

import pytest
import numpy as np

from privacyfilter import config
from privacyfilter.detectors import FaceRegion
from privacyfilter.modes import Mode
from privacyfilter.transforms import (
    TRANSFORMS,
    apply_transform,
    blur,
    identity,
    occlude,
    outline,
    pixelate,
    region_view,
)


def noise_frame(h=240, w=320, seed=0):
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, size=(h, w, 3), dtype=np.uint8)


def outside_mask(shape, region):
    mask = np.ones(shape[:2], dtype=bool)
    mask[region.y:region.y2, region.x:region.x2] = False
    return mask


REGIONS = [
    FaceRegion(50, 50, 100, 100),
    FaceRegion(0, 0, 40, 60),
    FaceRegion(280, 180, 40, 60),
    FaceRegion(10, 200, 7, 5),
]


class TestRegionBounds:
    """Transforms never touch pixels outside their region."""

    @pytest.mark.parametrize("mode", list(Mode))
    @pytest.mark.parametrize("region", REGIONS)
    def test_outside_region_unchanged(self, mode, region):
        """Test every mode against regions of various sizes and positions."""
        frame = noise_frame()
        original = frame.copy()

        apply_transform(frame, region, mode)

        mask = outside_mask(frame.shape, region)
        np.testing.assert_array_equal(frame[mask], original[mask])

    def test_region_partly_outside_frame_is_clipped(self):
        """Test that a region hanging off the frame edge is clipped."""
        frame = noise_frame(100, 100)
        occlude(frame, FaceRegion(80, 80, 50, 50))

        assert (frame[80:, 80:] == 0).all()
        assert frame.shape == (100, 100, 3)

    def test_region_view_writes_through(self):
        """Test that the region view aliases the frame."""
        frame = np.zeros((20, 20, 3), dtype=np.uint8)
        view = region_view(frame, FaceRegion(5, 5, 4, 4))
        view[:] = 7

        assert view.shape == (4, 4, 3)
        assert (frame[5:9, 5:9] == 7).all()
        assert frame.sum() == 7 * 4 * 4 * 3


class TestOcclude:
    """Tests for the black box transform."""

    def test_fills_exactly_the_region(self):
        """Test that every pixel of the region becomes the fill color."""
        frame = noise_frame()
        region = FaceRegion(50, 50, 100, 100)
        occlude(frame, region)

        assert (frame[50:150, 50:150] == 0).all()

    def test_custom_fill_color(self):
        """Test filling with a non-black color."""
        frame = np.zeros((50, 50, 3), dtype=np.uint8)
        occlude(frame, FaceRegion(10, 10, 5, 5), fill_color=(255, 0, 0))

        assert (frame[10:15, 10:15] == [255, 0, 0]).all()


class TestOutline:
    """Tests for the yellow box outline."""

    def test_border_pixels_are_outline_color(self):
        """Test that a 2 pixel border is drawn inside the region."""
        frame = noise_frame()
        region = FaceRegion(50, 50, 100, 100)
        outline(frame, region)

        color = np.array(config.OUTLINE_COLOR, dtype=np.uint8)
        roi = frame[50:150, 50:150]
        assert (roi[:2, :] == color).all()
        assert (roi[-2:, :] == color).all()
        assert (roi[:, :2] == color).all()
        assert (roi[:, -2:] == color).all()

    def test_interior_unchanged(self):
        """Test that pixels inside the border are not touched."""
        frame = noise_frame()
        original = frame.copy()
        outline(frame, FaceRegion(50, 50, 100, 100))

        np.testing.assert_array_equal(frame[52:148, 52:148], original[52:148, 52:148])

    def test_thickness_one(self):
        """Test a single pixel border."""
        frame = np.zeros((30, 30, 3), dtype=np.uint8)
        outline(frame, FaceRegion(5, 5, 10, 10), thickness=1)

        assert (frame[5, 5:15] == config.OUTLINE_COLOR).all()
        assert (frame[6:14, 6:14] == 0).all()

    def test_region_thinner_than_border(self):
        """Test a region smaller than twice the thickness."""
        frame = np.zeros((30, 30, 3), dtype=np.uint8)
        outline(frame, FaceRegion(5, 5, 3, 3), thickness=2)

        assert (frame[5:8, 5:8] == config.OUTLINE_COLOR).all()
        assert frame[:5].sum() == 0


class TestBlur:
    """Tests for the Gaussian blur transform."""

    def test_blur_changes_region(self):
        """Test that a noisy region is smoothed."""
        frame = noise_frame()
        original = frame.copy()
        blur(frame, FaceRegion(50, 50, 100, 100))

        roi = frame[50:150, 50:150].astype(np.float64)
        assert roi.std() < original[50:150, 50:150].astype(np.float64).std()

    def test_region_smaller_than_kernel(self):
        """Test that the kernel is shrunk to fit a small region."""
        frame = noise_frame()
        original = frame.copy()
        blur(frame, FaceRegion(10, 10, 20, 20), kernel_size=55)

        assert not np.array_equal(frame[10:30, 10:30], original[10:30, 10:30])

    def test_tiny_region_unchanged(self):
        """Test that a region too small for a 3x3 kernel is left alone."""
        frame = noise_frame()
        original = frame.copy()
        blur(frame, FaceRegion(10, 10, 2, 40))

        np.testing.assert_array_equal(frame, original)

    def test_even_kernel_size(self):
        """Test that an even kernel size does not raise."""
        frame = noise_frame()
        blur(frame, FaceRegion(50, 50, 100, 100), kernel_size=50)

        assert frame.shape == (240, 320, 3)


class TestPixelate:
    """Tests for the mosaic transform."""

    @staticmethod
    def assert_blocky(roi, block_size):
        h, w = roi.shape[:2]
        for by in range(0, h, block_size):
            for bx in range(0, w, block_size):
                block = roi[by:by + block_size, bx:bx + block_size]
                assert (block == block[0, 0]).all()

    def test_blocks_are_uniform(self):
        """Test that each block has a single color."""
        frame = noise_frame()
        pixelate(frame, FaceRegion(50, 50, 100, 100), block_size=10)

        self.assert_blocky(frame[50:150, 50:150], 10)

    def test_second_application_keeps_block_structure(self):
        """Test that pixelating twice keeps the same blocks."""
        frame = noise_frame()
        region = FaceRegion(50, 50, 100, 100)
        pixelate(frame, region, block_size=10)
        pixelate(frame, region, block_size=10)

        self.assert_blocky(frame[50:150, 50:150], 10)

    @pytest.mark.parametrize("block_size", [1, 0, -5])
    def test_small_block_size_is_noop(self, block_size):
        """Test that block sizes <= 1 leave the region unchanged."""
        frame = noise_frame()
        original = frame.copy()
        pixelate(frame, FaceRegion(50, 50, 100, 100), block_size=block_size)

        np.testing.assert_array_equal(frame, original)

    @pytest.mark.parametrize("region", [FaceRegion(10, 10, 9, 50), FaceRegion(10, 10, 50, 9)])
    def test_region_smaller_than_block_is_noop(self, region):
        """Test that a region narrower or shorter than one block is unchanged."""
        frame = noise_frame()
        original = frame.copy()
        pixelate(frame, region, block_size=10)

        np.testing.assert_array_equal(frame, original)

    def test_preserves_region_size(self):
        """Test a region that is not a multiple of the block size."""
        frame = noise_frame()
        original = frame.copy()
        pixelate(frame, FaceRegion(30, 40, 57, 43), block_size=10)

        mask = outside_mask(frame.shape, FaceRegion(30, 40, 57, 43))
        np.testing.assert_array_equal(frame[mask], original[mask])


class TestDispatch:
    """Tests for the mode to transform table."""

    def test_table_covers_every_mode(self):
        """Test that every mode has a transform."""
        assert set(TRANSFORMS) == set(Mode)

    def test_mode_numbers(self):
        """Test the trackbar numbering of the modes."""
        assert TRANSFORMS[Mode(0)] is identity
        assert TRANSFORMS[Mode(1)] is outline
        assert TRANSFORMS[Mode(2)] is blur
        assert TRANSFORMS[Mode(3)] is pixelate
        assert TRANSFORMS[Mode(4)] is occlude

    def test_none_mode_is_identity(self):
        """Test that mode NONE leaves the frame unchanged."""
        frame = noise_frame()
        original = frame.copy()
        apply_transform(frame, FaceRegion(50, 50, 100, 100), Mode.NONE)

        np.testing.assert_array_equal(frame, original)

    def test_params_filtered_per_transform(self):
        """Test that unrelated settings are not passed to a transform."""
        frame = noise_frame()
        apply_transform(
            frame, FaceRegion(50, 50, 100, 100), Mode.OCCLUDE_BLACK,
            kernel_size=31, block_size=4, fill_color=(1, 2, 3)
        )

        assert (frame[50:150, 50:150] == [1, 2, 3]).all()

    def test_integer_mode_accepted(self):
        """Test dispatching on a plain trackbar integer."""
        frame = noise_frame()
        apply_transform(frame, FaceRegion(0, 0, 10, 10), 4)

        assert (frame[:10, :10] == 0).all()

    def test_overlapping_regions_last_wins(self):
        """Test that the later region overwrites the overlap."""
        frame = np.zeros((100, 100, 3), dtype=np.uint8)
        apply_transform(frame, FaceRegion(10, 10, 50, 50), Mode.OCCLUDE_BLACK, fill_color=(255, 255, 255))
        apply_transform(frame, FaceRegion(30, 30, 50, 50), Mode.OCCLUDE_BLACK, fill_color=(9, 9, 9))

        assert (frame[30:60, 30:60] == 9).all()
        assert (frame[10:30, 10:30] == 255).all()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
