"""Unit tests for gamma encoding, 8-bit conversion and image export.

Tests cover:
- apply_gamma monotonicity, clamping and validation
- image_to_uint8 scaling and clamping
- Saving PNG and PPM files with Pillow
- RMSE between images
- Matplotlib preview with a non-interactive backend
"""

import numpy as np
import pytest


class TestApplyGamma:
    """Tests for gamma encoding."""

    def test_gamma_two_is_square_root(self):
        from src.raytracer.preview.display import apply_gamma

        image = np.array([[[0.0, 0.25, 1.0]]], dtype=np.float32)
        np.testing.assert_allclose(apply_gamma(image, 2.0), [[[0.0, 0.5, 1.0]]], atol=1e-7)

    def test_gamma_one_is_identity(self):
        from src.raytracer.preview.display import apply_gamma

        image = np.random.default_rng(0).random((4, 4, 3)).astype(np.float32)
        np.testing.assert_allclose(apply_gamma(image, 1.0), image)

    def test_general_gamma(self):
        from src.raytracer.preview.display import apply_gamma

        image = np.full((1, 1, 3), 0.125, dtype=np.float32)
        np.testing.assert_allclose(apply_gamma(image, 3.0), 0.5, atol=1e-6)

    def test_gamma_is_monotonic(self):
        from src.raytracer.preview.display import apply_gamma

        ramp = np.linspace(0.0, 1.0, 256, dtype=np.float32).reshape(1, -1, 1)
        encoded = apply_gamma(np.repeat(ramp, 3, axis=2))
        assert np.all(np.diff(encoded[0, :, 0]) >= 0.0)

    def test_gamma_is_not_idempotent(self):
        from src.raytracer.preview.display import apply_gamma

        image = np.full((1, 1, 3), 0.25, dtype=np.float32)
        once = apply_gamma(image)
        twice = apply_gamma(once)
        assert not np.allclose(once, twice)

    def test_gamma_clamps_out_of_range(self):
        from src.raytracer.preview.display import apply_gamma

        image = np.array([[[-0.5, 1.5, 0.5]]], dtype=np.float32)
        encoded = apply_gamma(image)
        assert encoded[0, 0, 0] == 0.0
        assert encoded[0, 0, 1] == 1.0
        assert not np.any(np.isnan(encoded))

    def test_gamma_rejects_non_positive(self):
        from src.raytracer.preview.display import apply_gamma

        with pytest.raises(ValueError, match="gamma"):
            apply_gamma(np.zeros((1, 1, 3), dtype=np.float32), 0.0)


class TestImageToUint8:
    """Tests for 8-bit conversion."""

    def test_endpoints(self):
        from src.raytracer.preview.export import image_to_uint8

        image = np.array([[[0.0, 0.5, 1.0]]], dtype=np.float32)
        assert image_to_uint8(image).tolist() == [[[0, 127, 255]]]

    def test_clamps_out_of_range(self):
        from src.raytracer.preview.export import image_to_uint8

        image = np.array([[[-1.0, 2.0, 0.999]]], dtype=np.float32)
        assert image_to_uint8(image).tolist() == [[[0, 255, 255]]]

    def test_dtype_and_shape(self):
        from src.raytracer.preview.export import image_to_uint8

        out = image_to_uint8(np.zeros((3, 5, 3), dtype=np.float32))
        assert out.dtype == np.uint8
        assert out.shape == (3, 5, 3)


class TestSaveImage:
    """Tests for writing images to disk."""

    def _gradient(self):
        row = np.linspace(0.0, 1.0, 8, dtype=np.float32)
        image = np.zeros((4, 8, 3), dtype=np.float32)
        image[:, :, 0] = row
        image[0, :, :] = 1.0
        return image

    @pytest.mark.parametrize("suffix", [".png", ".ppm"])
    def test_save_image_from_array(self, tmp_path, suffix):
        from PIL import Image

        from src.raytracer.preview.display import apply_gamma
        from src.raytracer.preview.export import image_to_uint8, save_image_from_array

        image = self._gradient()
        path = tmp_path / f"out{suffix}"
        save_image_from_array(image, str(path))

        with Image.open(path) as img:
            assert img.size == (8, 4)
            loaded = np.asarray(img)
        np.testing.assert_array_equal(loaded, image_to_uint8(apply_gamma(image)))

    def test_ppm_header(self, tmp_path):
        from src.raytracer.preview.export import save_image_from_array

        path = tmp_path / "out.ppm"
        save_image_from_array(self._gradient(), str(path))
        header = path.read_bytes()[:2]
        assert header in (b"P6", b"P3")

    def test_top_row_is_written_first(self, tmp_path):
        from PIL import Image

        from src.raytracer.preview.export import save_image_from_array

        path = tmp_path / "out.png"
        save_image_from_array(self._gradient(), str(path))
        with Image.open(path) as img:
            assert img.getpixel((0, 0)) == (255, 255, 255)
            assert img.getpixel((0, 3)) == (0, 0, 0)


class TestComputeRmse:
    """Tests for image comparison."""

    def test_identical_images(self):
        from src.raytracer.preview.export import compute_rmse

        image = np.ones((2, 2, 3), dtype=np.float32)
        assert compute_rmse(image, image) == 0.0

    def test_constant_difference(self):
        from src.raytracer.preview.export import compute_rmse

        a = np.zeros((2, 2, 3), dtype=np.float32)
        b = np.full((2, 2, 3), 0.5, dtype=np.float32)
        assert abs(compute_rmse(a, b) - 0.5) < 1e-9

    def test_shape_mismatch(self):
        from src.raytracer.preview.export import compute_rmse

        with pytest.raises(ValueError, match="shapes must match"):
            compute_rmse(np.zeros((2, 2, 3)), np.zeros((3, 2, 3)))


class TestShowPreview:
    """Tests for the Matplotlib preview."""

    def test_show_preview_draws_image(self, down_z_camera, monkeypatch):
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt

        from src.raytracer.core.progressive import ProgressiveRenderer
        from src.raytracer.preview.display import show_preview

        monkeypatch.setattr(plt, "show", lambda **kwargs: None)

        renderer = ProgressiveRenderer(8, 4, max_depth=3)
        renderer.render(1)
        show_preview(renderer, block=False)

        ax = plt.gcf().axes[0]
        assert ax.get_title() == "Render Preview - 1 SPP"
        assert ax.images[0].get_array().shape == (4, 8, 3)
        plt.close("all")
