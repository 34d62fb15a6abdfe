"""
Tests for core.image.transforms module.

Covers resize aspect handling, crop validation order, rotation geometry
and backgrounds, watermark compositing and opacity.
"""

import cv2
import numpy as np
import pytest

from imagechain.core import engine as image_engine
from imagechain.core.enums import Status
from imagechain.core.handle import load_image
from imagechain.core.image.metadata import extract_metadata
from imagechain.core.image.transforms import (
    change_image_opacity,
    clamp_opacity,
    compute_resize_scale,
    crop_image,
    resize_image,
    rotate_image,
    watermark_image,
)
from imagechain.schemas import (
    CropOptions,
    OpacityOptions,
    ResizeOptions,
    RotateOptions,
    WatermarkOptions,
)


def _size(handle):
    meta, status = extract_metadata(handle)
    assert status.is_success
    return meta.width, meta.height


class TestComputeResizeScale:
    """Tests for compute_resize_scale"""

    def test_aspect_uses_smaller_ratio(self):
        assert compute_resize_scale(1000, 500, 500, 500, True) == (0.5, 0.5)

    def test_single_dimension_mirrors_other_axis(self):
        assert compute_resize_scale(1000, 500, None, 100, False) == (0.2, 0.2)

    def test_independent_axes(self):
        scale_x, scale_y = compute_resize_scale(1000, 500, 250, 500, False)

        assert scale_x == pytest.approx(0.25)
        assert scale_y == pytest.approx(1.0)

    @pytest.mark.parametrize("width,height", [(None, None), (0, 0), (-5, None), (0, -1)])
    def test_no_positive_dimension(self, width, height):
        with pytest.raises(ValueError):
            compute_resize_scale(1000, 500, width, height, True)


class TestResizeImage:
    """Tests for resize_image"""

    def test_resize_width_keeps_aspect(self, handle):
        """Test resizing 1000x500 to width 500 gives 500x250"""
        status = resize_image(handle, ResizeOptions(width=500, maintain_aspect=True))

        assert status is Status.SUCCESS
        assert _size(handle) == (500, 250)

    def test_resize_both_keeps_aspect(self, handle):
        """Test aspect mode fits inside the requested box"""
        status = resize_image(handle, ResizeOptions(width=500, height=500))

        assert status is Status.SUCCESS
        assert _size(handle) == (500, 250)

    def test_resize_stretch(self, handle):
        status = resize_image(
            handle, ResizeOptions(width=300, height=300, maintain_aspect=False)
        )

        assert status is Status.SUCCESS
        assert _size(handle) == (300, 300)

    def test_resize_height_only_without_aspect(self, handle):
        """Test a single dimension scales both axes even without aspect mode"""
        status = resize_image(handle, ResizeOptions(height=100, maintain_aspect=False))

        assert status is Status.SUCCESS
        assert _size(handle) == (200, 100)

    def test_resize_upscale(self, handle):
        status = resize_image(handle, ResizeOptions(width=2000))

        assert status is Status.SUCCESS
        assert _size(handle) == (2000, 1000)

    @pytest.mark.parametrize(
        "options",
        [ResizeOptions(), ResizeOptions(width=0, height=0), ResizeOptions(width=-10)],
    )
    def test_invalid_dimensions(self, handle, options):
        """Test resize without a positive dimension fails and leaves the image alone"""
        status = resize_image(handle, options)

        assert status is Status.INVALID_DIMENSIONS
        assert _size(handle) == (1000, 500)

    def test_resize_keeps_band_count(self, rgba_png_path):
        handle, _ = load_image(rgba_png_path)

        assert resize_image(handle, ResizeOptions(width=50)) is Status.SUCCESS
        assert handle.raster.bands == 4
        handle.release()


class TestCropImage:
    """Tests for crop_image"""

    def test_crop_region(self, handle):
        status = crop_image(handle, CropOptions(x=100, y=50, width=300, height=200))

        assert status is Status.SUCCESS
        assert _size(handle) == (300, 200)

    def test_crop_full_image(self, handle):
        status = crop_image(handle, CropOptions(x=0, y=0, width=1000, height=500))

        assert status is Status.SUCCESS
        assert _size(handle) == (1000, 500)

    def test_crop_pixels(self, handle):
        """Test the crop keeps exactly the selected pixels"""
        expected = handle.raster.pixels[100:150, 120:170].copy()

        crop_image(handle, CropOptions(x=120, y=100, width=50, height=50))

        assert np.array_equal(handle.raster.pixels, expected)

    @pytest.mark.parametrize(
        "options,expected",
        [
            (CropOptions(x=0, y=0, width=0, height=10), Status.INVALID_DIMENSIONS),
            (CropOptions(x=0, y=0, width=10, height=-1), Status.INVALID_DIMENSIONS),
            (CropOptions(x=-1, y=0, width=10, height=10), Status.INVALID_POSITION),
            (CropOptions(x=0, y=-5, width=10, height=10), Status.INVALID_POSITION),
            (CropOptions(x=900, y=0, width=200, height=10), Status.INVALID_BOUNDS),
            (CropOptions(x=0, y=0, width=1000, height=501), Status.INVALID_BOUNDS),
        ],
    )
    def test_crop_failures(self, handle, options, expected):
        """Test each validation failure and that the image is unchanged"""
        status = crop_image(handle, options)

        assert status is expected
        assert _size(handle) == (1000, 500)

    def test_dimensions_checked_before_position(self, handle):
        status = crop_image(handle, CropOptions(x=-1, y=-1, width=0, height=0))

        assert status is Status.INVALID_DIMENSIONS

    def test_position_checked_before_bounds(self, handle):
        status = crop_image(handle, CropOptions(x=-1, y=0, width=5000, height=10))

        assert status is Status.INVALID_POSITION

    def test_bounds_use_current_size(self, handle):
        """Test bounds are checked against the image after earlier transforms"""
        resize_image(handle, ResizeOptions(width=500))

        status = crop_image(handle, CropOptions(x=0, y=0, width=600, height=100))

        assert status is Status.INVALID_BOUNDS


class TestRotateImage:
    """Tests for rotate_image"""

    def test_rotate_90_swaps_dimensions(self, handle):
        status = rotate_image(handle, RotateOptions(angle=90))

        assert status is Status.SUCCESS
        assert _size(handle) == (500, 1000)

    def test_rotate_90_is_clockwise(self, handle):
        """Test the top-left corner moves to the top-right"""
        handle.raster.pixels[0, 0] = (1, 2, 3)

        rotate_image(handle, RotateOptions(angle=90))

        assert tuple(handle.raster.pixels[0, -1]) == (1, 2, 3)

    def test_rotate_180_keeps_dimensions(self, handle):
        assert rotate_image(handle, RotateOptions(angle=180)) is Status.SUCCESS
        assert _size(handle) == (1000, 500)

    def test_rotate_negative_angle(self, handle):
        assert rotate_image(handle, RotateOptions(angle=-90)) is Status.SUCCESS
        assert _size(handle) == (500, 1000)

    def test_rotate_zero_is_identity(self, handle):
        before = handle.raster.pixels.copy()

        assert rotate_image(handle, RotateOptions(angle=0)) is Status.SUCCESS
        assert np.array_equal(handle.raster.pixels, before)

    def test_rotate_arbitrary_angle_grows_canvas(self, handle):
        """Test a 45 degree rotation enlarges the canvas to fit the corners"""
        status = rotate_image(handle, RotateOptions(angle=45))

        width, height = _size(handle)
        assert status is Status.SUCCESS
        assert width == pytest.approx(1061, abs=2)
        assert height == pytest.approx(1061, abs=2)

    def test_colour_background_is_white(self, handle):
        rotate_image(handle, RotateOptions(angle=30))

        assert tuple(handle.raster.pixels[0, 0]) == (255, 255, 255)

    def test_alpha_background_is_transparent(self, rgba_png_path):
        handle, _ = load_image(rgba_png_path)

        rotate_image(handle, RotateOptions(angle=30))

        assert handle.raster.bands == 4
        assert handle.raster.pixels[0, 0, 3] == 0
        handle.release()

    def test_grey_background_is_black(self, gray_png_path):
        handle, _ = load_image(gray_png_path)

        rotate_image(handle, RotateOptions(angle=30))

        assert handle.raster.bands == 1
        assert handle.raster.pixels[0, 0] == 0
        handle.release()


class TestWatermarkImage:
    """Tests for watermark_image"""

    def test_opaque_watermark(self, handle, overlay_handle):
        status = watermark_image(handle, overlay_handle, WatermarkOptions(x=10, y=20))

        assert status is Status.SUCCESS
        assert tuple(handle.raster.pixels[20, 10]) == (0, 0, 255)
        assert tuple(handle.raster.pixels[59, 59]) == (0, 0, 255)
        assert _size(handle) == (1000, 500)

    def test_zero_opacity_leaves_base_identical(self, handle, overlay_handle):
        before = handle.raster.pixels.copy()

        status = watermark_image(handle, overlay_handle, WatermarkOptions(opacity=0.0))

        assert status is Status.SUCCESS
        assert np.array_equal(handle.raster.pixels, before)

    def test_opacity_above_one_is_clamped(self, handle, overlay_handle):
        status = watermark_image(handle, overlay_handle, WatermarkOptions(opacity=5.0))

        assert status is Status.SUCCESS
        assert tuple(handle.raster.pixels[0, 0]) == (0, 0, 255)

    def test_partial_opacity_blends(self, handle, overlay_handle):
        """Test half opacity mixes overlay and base colour"""
        watermark_image(handle, overlay_handle, WatermarkOptions(opacity=0.5))

        # base is black at (0, 0), overlay is pure red
        assert handle.raster.pixels[0, 0, 2] == pytest.approx(128, abs=1)
        assert handle.raster.pixels[0, 0, 0] == 0

    def test_negative_offset_is_clipped(self, handle, overlay_handle):
        """Test only the overlapping part of the overlay is drawn"""
        status = watermark_image(handle, overlay_handle, WatermarkOptions(x=-40, y=-30))

        assert status is Status.SUCCESS
        assert tuple(handle.raster.pixels[9, 9]) == (0, 0, 255)
        assert tuple(handle.raster.pixels[10, 10]) == (0, 0, 0)

    def test_offset_past_edge(self, handle, overlay_handle):
        before = handle.raster.pixels.copy()

        status = watermark_image(handle, overlay_handle, WatermarkOptions(x=5000, y=5000))

        assert status is Status.SUCCESS
        assert np.array_equal(handle.raster.pixels, before)

    def test_overlay_not_modified(self, handle, overlay_handle):
        """Test the overlay handle stays valid and unchanged"""
        before = overlay_handle.raster.pixels.copy()

        watermark_image(handle, overlay_handle, WatermarkOptions(opacity=0.3))

        assert overlay_handle.is_valid
        assert np.array_equal(overlay_handle.raster.pixels, before)

    def test_transparent_overlay_region(self, handle, rgba_png_path):
        """Test transparent overlay pixels leave the base visible"""
        overlay, _ = load_image(rgba_png_path)

        watermark_image(handle, overlay, WatermarkOptions())

        assert tuple(handle.raster.pixels[0, 0]) == (30, 90, 200)
        assert tuple(handle.raster.pixels[0, 150]) == (0, 0, 0)
        overlay.release()


class TestChangeImageOpacity:
    """Tests for change_image_opacity"""

    def test_adds_alpha_to_opaque_image(self, handle):
        status = change_image_opacity(handle, OpacityOptions(opacity=0.5))

        assert status is Status.SUCCESS
        assert handle.raster.bands == 4
        assert handle.raster.pixels[0, 0, 3] == 128

    def test_scales_existing_alpha(self, rgba_png_path):
        handle, _ = load_image(rgba_png_path)

        change_image_opacity(handle, OpacityOptions(opacity=0.5))

        assert handle.raster.pixels[0, 0, 3] == 128
        assert handle.raster.pixels[0, 150, 3] == 0
        handle.release()

    def test_colour_untouched(self, handle):
        before = handle.raster.pixels.copy()

        change_image_opacity(handle, OpacityOptions(opacity=0.25))

        assert np.array_equal(handle.raster.pixels[..., :3], before)

    @pytest.mark.parametrize("opacity,alpha", [(-1.0, 0), (2.0, 255)])
    def test_out_of_range_is_clamped(self, handle, opacity, alpha):
        status = change_image_opacity(handle, OpacityOptions(opacity=opacity))

        assert status is Status.SUCCESS
        assert handle.raster.pixels[0, 0, 3] == alpha


class TestClampOpacity:
    @pytest.mark.parametrize("value,expected", [(-0.5, 0.0), (0.3, 0.3), (1.7, 1.0)])
    def test_clamp(self, value, expected):
        assert clamp_opacity(value) == expected


def _raise_cv2_error(*args, **kwargs):
    raise cv2.error("engine failure")


def _raise_memory_error(*args, **kwargs):
    raise MemoryError()


class TestEngineFailureKeepsImage:
    """Tests that an engine failure mid-operation leaves the handle untouched"""

    @pytest.mark.parametrize(
        "failure,expected",
        [
            (_raise_cv2_error, Status.ENGINE_ERROR),
            (_raise_memory_error, Status.ALLOCATION_FAILURE),
        ],
    )
    @pytest.mark.parametrize(
        "primitive,operation",
        [
            ("resample", lambda handle, overlay: resize_image(handle, ResizeOptions(width=300))),
            ("rotate", lambda handle, overlay: rotate_image(handle, RotateOptions(angle=45))),
            (
                "composite_over",
                lambda handle, overlay: watermark_image(handle, overlay, WatermarkOptions()),
            ),
            (
                "scale_alpha",
                lambda handle, overlay: change_image_opacity(handle, OpacityOptions(opacity=0.5)),
            ),
        ],
    )
    def test_failure_keeps_previous_raster(
        self, monkeypatch, handle, overlay_handle, primitive, operation, failure, expected
    ):
        before = handle.raster.pixels.copy()
        monkeypatch.setattr(image_engine, primitive, failure)

        status = operation(handle, overlay_handle)

        assert status is expected
        assert handle.is_valid
        assert handle.raster.pixels.shape == before.shape
        assert np.array_equal(handle.raster.pixels, before)
        assert _size(handle) == (1000, 500)
