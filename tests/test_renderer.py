"""Tests for the whole-image Renderer."""

import numpy as np
import pytest


def _renderer(scene, width=8, height=8):
    from raycaster.camera.pinhole import default_camera
    from raycaster.core.renderer import Renderer

    return Renderer(scene, default_camera(aspect_ratio=width / height), width, height)


def _scene(**settings):
    from raycaster.core.settings import RenderSettings
    from raycaster.scene.intersection import Scene

    values = {"phong": False, "shadows": False, "reflections": False}
    values.update(settings)
    return Scene(capacity=8, settings=RenderSettings(**values))


class TestRendererSetup:
    """Tests for construction and state checks."""

    @pytest.mark.parametrize("size", [(0, 10), (10, -1), (5000, 10), (10, 5000)])
    def test_invalid_size(self, size):
        with pytest.raises(ValueError):
            _renderer(_scene(), *size)

    def test_not_rendered_yet(self):
        renderer = _renderer(_scene())
        assert not renderer.rendered
        with pytest.raises(RuntimeError):
            renderer.get_image_numpy()
        with pytest.raises(RuntimeError):
            renderer.get_hit_times()

    def test_repr(self):
        renderer = _renderer(_scene(), 4, 2)
        assert repr(renderer) == "Renderer(width=4, height=2, rendered=False)"


class TestRendering:
    """Tests for rendered pixel values."""

    def test_empty_scene_is_background(self):
        renderer = _renderer(_scene())
        elapsed = renderer.render()
        assert elapsed >= 0.0
        assert renderer.rendered

        image = renderer.get_image_numpy()
        assert image.shape == (8, 8, 3)
        assert image.dtype == np.float32
        np.testing.assert_allclose(image, 1.0)
        np.testing.assert_allclose(renderer.get_hit_times(), 0.0)

    def test_custom_background(self):
        renderer = _renderer(_scene(background_color=(0.0, 0.5, 0.0)))
        renderer.render()
        image = renderer.get_image_numpy()
        np.testing.assert_allclose(image[..., 1], 0.5)
        np.testing.assert_allclose(image[..., 0], 0.0)

    def test_colours_are_clamped(self):
        from raycaster.materials.phong import MaterialParams

        scene = _scene()
        scene.add_plane((0, 0, 0), (0, 0, 1), MaterialParams(ambient=(2.0, 0.5, -1.0)))
        renderer = _renderer(scene)
        renderer.render()
        image = renderer.get_image_numpy()
        np.testing.assert_allclose(image[..., 0], 1.0)
        np.testing.assert_allclose(image[..., 1], 0.5, atol=1e-6)
        np.testing.assert_allclose(image[..., 2], 0.0)

    def test_image_orientation(self):
        """A sphere above the view axis shows in the top half of the image."""
        from raycaster.materials.phong import MaterialParams

        scene = _scene()
        scene.add_sphere((0, 100, 0), 60.0, MaterialParams(ambient=(1.0, 0.0, 0.0)))
        renderer = _renderer(scene)
        renderer.render()

        image = renderer.get_image_numpy()
        times = renderer.get_hit_times()
        np.testing.assert_allclose(image[2, 3], [1.0, 0.0, 0.0], atol=1e-6)
        np.testing.assert_allclose(image[6, 3], [1.0, 1.0, 1.0], atol=1e-6)
        assert times[2, 3] > 0.0
        assert times[6, 3] == 0.0

    def test_matches_cast_rays(self):
        """Every pixel equals the batch cast of the same camera ray."""
        from raycaster.camera.pinhole import default_camera, generate_rays
        from raycaster.core.integrator import cast_rays
        from raycaster.materials.phong import MaterialParams

        scene = _scene(phong=True, shadows=True, light_position=(0.0, 50.0, 125.0))
        scene.add_plane((0, -60, 0), (0, 1, 0), MaterialParams(ambient=(0.5, 0.5, 0.5)))
        scene.add_sphere((0, -20, 50), 30.0, MaterialParams(diffuse=(0.2, 0.8, 0.2)))
        renderer = _renderer(scene, 8, 6)
        renderer.render()

        origins, directions = generate_rays(default_camera(aspect_ratio=8 / 6), 8, 6)
        result = cast_rays(scene, origins, directions)
        expected = np.where(result["time"][:, None] > 0.0, np.clip(result["color"], 0.0, 1.0), 1.0)

        np.testing.assert_allclose(renderer.get_image_numpy().reshape(-1, 3), expected, atol=1e-4)
        np.testing.assert_allclose(renderer.get_hit_times().reshape(-1), result["time"], rtol=1e-4)

    def test_gamma(self):
        renderer = _renderer(_scene(background_color=(0.25, 0.25, 0.25)))
        renderer.render()
        image = renderer.get_image_numpy(gamma=2.0)
        np.testing.assert_allclose(image, 0.5, atol=1e-6)

    def test_save_image(self, tmp_path):
        from PIL import Image

        renderer = _renderer(_scene(background_color=(0.0, 0.0, 1.0)), 4, 3)
        renderer.render()
        path = tmp_path / "out.png"
        renderer.save_image(str(path))

        with Image.open(path) as img:
            assert img.size == (4, 3)
            assert img.getpixel((0, 0)) == (0, 0, 255)

    def test_uint8_rounds_like_export(self):
        """Mid-grey maps to 128 on every output path, not a truncated 127."""
        from raycaster.preview.export import image_to_uint8

        renderer = _renderer(_scene(background_color=(0.5, 0.5, 0.5)), 4, 3)
        renderer.render()
        image = renderer.get_image_uint8()
        assert image.dtype == np.uint8
        assert np.all(image == 128)
        np.testing.assert_array_equal(image, image_to_uint8(renderer.get_image_numpy()))

    def test_save_image_matches_save_png(self, tmp_path):
        from PIL import Image

        from raycaster.preview.export import save_png

        renderer = _renderer(_scene(background_color=(0.5, 0.2, 0.9)), 4, 3)
        renderer.render()
        renderer.save_image(str(tmp_path / "a.png"), gamma=2.2)
        save_png(renderer, str(tmp_path / "b.png"), gamma=2.2)

        with Image.open(tmp_path / "a.png") as a, Image.open(tmp_path / "b.png") as b:
            np.testing.assert_array_equal(np.asarray(a), np.asarray(b))
