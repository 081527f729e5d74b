import unittest
import numpy as np
from PIL import Image
import raytrace
from ExampleSceneDef import *
from geometry import Plane, Sphere
from utils import to_rgb8, to_srgb8, to_pil_image, vec


class TestColorConversion(unittest.TestCase):

    def test_to_rgb8(self):
        img = np.array([[[0.0, 0.5, 1.0], [-0.2, 1.7, 0.2]]], np.float32)
        out = to_rgb8(img)
        self.assertEqual(out.dtype, np.uint8)
        np.testing.assert_array_equal(out, [[[0, 128, 255], [0, 255, 51]]])

    def test_to_srgb8_endpoints(self):
        out = to_srgb8(np.array([[[0.0, 1.0, 0.5]]], np.float32))
        np.testing.assert_array_equal(out[0, 0, :2], [0, 255])
        # gamma encoding brightens mid tones
        self.assertGreater(out[0, 0, 2], 128)

    def test_pil_handoff(self):
        im = to_pil_image(np.zeros((2, 3, 3), np.uint8))
        self.assertIsInstance(im, Image.Image)
        self.assertEqual(im.size, (3, 2))
        self.assertIsNone(to_pil_image(np.zeros((0, 3, 3), np.uint8)))


class TestDefaultScene(unittest.TestCase):

    def test_contents(self):
        example = DefaultScene()
        surfs = example.scene.surfs
        self.assertEqual(len(surfs), 5)
        self.assertIsInstance(surfs[0], Plane)
        self.assertIsInstance(surfs[1], Plane)
        self.assertTrue(all(isinstance(s, Sphere) for s in surfs[2:]))
        self.assertEqual(len(example.lights), 3)
        np.testing.assert_allclose(example.camera.eye, [0, 0, 10])
        np.testing.assert_array_equal(example.scene.bg_color, [0, 0, 0])

    def test_rebuilt_each_call(self):
        first = DefaultScene()
        first.lights[0].intensity = 0.0
        second = DefaultScene()
        self.assertIsNot(first.scene, second.scene)
        self.assertGreater(second.lights[0].intensity, 0.0)

    def test_render(self):
        im = DefaultScene().render(output_shape=[8, 12])
        self.assertIsInstance(im, Image.Image)
        self.assertEqual(im.size, (12, 8))
        pix = np.asarray(im)
        # the green sphere sits in the middle of the frame
        center = pix[4, 6]
        self.assertGreater(int(center[1]), int(center[0]))
        self.assertGreater(int(center[1]), int(center[2]))

    def test_knobs_are_clamped(self):
        example = DefaultScene()
        low = np.asarray(example.render(output_shape=[4, 6], intensity_scale=0.0))
        floor = np.asarray(example.render(output_shape=[4, 6], intensity_scale=INTENSITY_RANGE[0]))
        np.testing.assert_array_equal(low, floor)
        high = np.asarray(example.render(output_shape=[4, 6], p=1e9))
        ceiling = np.asarray(example.render(output_shape=[4, 6], p=P_RANGE[1]))
        np.testing.assert_array_equal(high, ceiling)

    def test_matches_direct_render(self):
        example = DefaultScene()
        pix = raytrace.render_image(example.camera, example.scene, example.lights, 6, 4,
                                    p=raytrace.DEFAULT_P, intensity_scale=DEFAULT_INTENSITY_SCALE)
        np.testing.assert_array_equal(np.asarray(example.render(output_shape=[4, 6])), to_rgb8(pix))


class TestSingleSphereExample(unittest.TestCase):

    def test_lit_from_above(self):
        example = SingleSphereExample()
        pix = raytrace.render_image(example.camera, example.scene, example.lights, 20, 20)
        # top of the sphere faces the light, the bottom only gets ambient
        top = pix[8, 10]
        bottom = pix[11, 10]
        self.assertGreater(top[0], bottom[0])
        np.testing.assert_allclose(bottom, raytrace.AMBIENT_COEFFICIENT * 0.5, atol=1e-6)

    def test_gamma_render(self):
        im = SingleSphereExample().render(output_shape=[4, 4], gamma_correct=True)
        self.assertEqual(im.size, (4, 4))

    def test_empty_render_is_none(self):
        self.assertIsNone(SingleSphereExample().render(output_shape=[0, 5]))


if __name__ == '__main__':
    unittest.main()
