import unittest
import numpy as np
from raytrace import *
from geometry import Plane, Sphere, Hit, no_hit
from materials import Material, DEFAULT_SPECULAR
from utils import normalize, vec

def assert_direction_matches(v, w):
    np.testing.assert_almost_equal(normalize(v), normalize(w))


class TestRay(unittest.TestCase):

    def test_at(self):
        ray = Ray(vec([1, 2, 3]), vec([0, 0, -1]))
        np.testing.assert_allclose(ray.at(0), [1, 2, 3])
        np.testing.assert_allclose(ray.at(2.5), [1, 2, 0.5])

    def test_double_precision(self):
        ray = Ray(vec([1, 2, 3]), vec([0, 0, -1]))
        self.assertEqual(ray.origin.dtype, np.float64)
        self.assertEqual(ray.direction.dtype, np.float64)


class TestSphereIntersect(unittest.TestCase):

    def confirm_hit(self, sphere, ray):
        # make sure hit is self-consistent, then return it
        hit = sphere.intersect(ray)
        self.assertLess(hit.t, np.inf)
        np.testing.assert_almost_equal(ray.origin + hit.t * ray.direction, hit.point)
        np.testing.assert_almost_equal(normalize(hit.point - sphere.center), hit.normal)
        self.assertAlmostEqual(np.linalg.norm(hit.point - sphere.center), sphere.radius)
        self.assertIs(hit.surface, sphere)
        return hit

    def test_unitsphere_hits(self):
        unit_sphere = Sphere(np.array([0,0,0]), 1.0, None)
        # dead center hit
        hit = self.confirm_hit(unit_sphere, Ray(vec([2.0,0.0,0.0]), vec([-1.0,0.0,0.0])))
        self.assertAlmostEqual(hit.t, 1.0)
        # off center hit
        hit = self.confirm_hit(unit_sphere, Ray(vec([1.0,0.5,0.0]), vec([-1.0,0.0,0.0])))
        self.assertAlmostEqual(hit.t, 1 - np.sin(np.pi/3))
        # center hit from off axis
        hit = self.confirm_hit(unit_sphere, Ray(vec([2.0,3.0,4.0]), normalize(vec([-2.0,-3.0,-4.0]))))
        self.assertAlmostEqual(hit.t, np.sqrt(29) - 1, places=5)

    def test_distance_to_center_minus_radius(self):
        sphere = Sphere(vec([-1,-5,-7]), 3.0, None)
        origin = vec([4.0, 1.0, -3.0])
        hit = self.confirm_hit(sphere, Ray(origin, normalize(sphere.center - origin)))
        self.assertAlmostEqual(hit.t, np.linalg.norm(origin - sphere.center) - 3.0, places=5)

    def test_unitsphere_misses(self):
        unit_sphere = Sphere(vec([0,0,0]), 1.0, None)
        # on axis miss
        hit = unit_sphere.intersect(Ray(vec([2.0,3.0,0.0]), vec([-1.0,0.0,0.0])))
        self.assertEqual(hit.t, np.inf)
        # pointing away
        hit = unit_sphere.intersect(Ray(vec([2.0,0.0,0.0]), vec([1.0,0.0,0.0])))
        self.assertIs(hit, no_hit)

    def test_tangent_is_miss(self):
        unit_sphere = Sphere(vec([0,0,0]), 1.0, None)
        hit = unit_sphere.intersect(Ray(vec([-5.0,1.0,0.0]), vec([1.0,0.0,0.0])))
        self.assertIs(hit, no_hit)

    def test_origin_inside_hits_far_side(self):
        unit_sphere = Sphere(vec([0,0,0]), 1.0, None)
        hit = self.confirm_hit(unit_sphere, Ray(vec([0.0,0.0,0.0]), vec([0.0,1.0,0.0])))
        self.assertAlmostEqual(hit.t, 1.0)
        np.testing.assert_allclose(hit.normal, [0, 1, 0])

    def test_interval(self):
        unit_sphere = Sphere(vec([0,0,0]), 1.0, None)
        # near root lies beyond end
        hit = unit_sphere.intersect(Ray(vec([5.0,0.0,0.0]), vec([-1.0,0.0,0.0]), end=3.5))
        self.assertIs(hit, no_hit)
        # near root before start, far root still counts
        hit = unit_sphere.intersect(Ray(vec([5.0,0.0,0.0]), vec([-1.0,0.0,0.0]), start=4.5))
        self.assertAlmostEqual(hit.t, 6.0)


class TestPlaneIntersect(unittest.TestCase):

    def setUp(self):
        self.floor = Plane(vec([0,0,0]), vec([0,1,0]), None, 2, 4)

    def down_from(self, x, z):
        return Ray(vec([x, 5, z]), vec([0, -1, 0]))

    def test_center(self):
        hit = self.floor.intersect(self.down_from(0, 0))
        self.assertAlmostEqual(hit.t, 5.0)
        np.testing.assert_allclose(hit.point, [0, 0, 0])
        np.testing.assert_allclose(hit.normal, [0, 1, 0])
        self.assertIs(hit.surface, self.floor)
        self.assertTrue(hit.inside)

    def test_edges_excluded(self):
        # width runs along x, height along z
        for x, z in [(1, 0), (-1, 0), (0, 2), (0, -2)]:
            self.assertIs(self.floor.intersect(self.down_from(x, z)), no_hit, (x, z))

    def test_just_inside_edges(self):
        for x, z in [(0.99, 0), (-0.99, 0), (0, 1.99), (0, -1.99)]:
            self.assertLess(self.floor.intersect(self.down_from(x, z)).t, np.inf, (x, z))

    def test_unbounded_query(self):
        hit = self.floor.intersect(self.down_from(3, 0), bounded=False)
        self.assertAlmostEqual(hit.t, 5.0)
        self.assertFalse(hit.inside)
        hit = self.floor.intersect(self.down_from(0.5, 0), bounded=False)
        self.assertTrue(hit.inside)

    def test_parallel_and_behind(self):
        self.assertIs(self.floor.intersect(Ray(vec([0, 5, 0]), vec([1, 0, 0]))), no_hit)
        self.assertIs(self.floor.intersect(Ray(vec([0, 5, 0]), vec([0, 1, 0]))), no_hit)
        # from below, facing away from the normal, still a hit
        hit = self.floor.intersect(Ray(vec([0, -2, 0]), vec([0, 1, 0])))
        self.assertAlmostEqual(hit.t, 2.0)

    def test_wall_axes(self):
        # a wall facing +z is bounded in x by width and in y by height
        wall = Plane(vec([0, 1, -50]), vec([0, 0, 1]), None, 600, 400)
        np.testing.assert_allclose(np.abs(wall.u), [1, 0, 0])
        np.testing.assert_allclose(np.abs(wall.v), [0, 1, 0])
        self.assertLess(wall.intersect(Ray(vec([0, 150, 0]), vec([0, 0, -1]))).t, np.inf)
        self.assertIs(wall.intersect(Ray(vec([0, 250, 0]), vec([0, 0, -1]))), no_hit)

    def test_normal_is_normalized(self):
        plane = Plane(vec([0,0,0]), vec([0,3,0]), None, 1, 1)
        np.testing.assert_allclose(plane.normal_at(vec([0.1, 0, 0.2])), [0, 1, 0])

    def test_zero_normal_never_hits(self):
        plane = Plane(vec([0,0,0]), vec([0,0,0]), None, 10, 10)
        self.assertIsNone(plane.normal)
        self.assertIs(plane.intersect(Ray(vec([0,5,0]), vec([0,-1,0]))), no_hit)
        self.assertIs(plane.intersect(Ray(vec([0,0,5]), vec([0,0,-1])), bounded=False), no_hit)


class TestCamera(unittest.TestCase):

    def test_default_camera(self):
        # eye at z=10 looking through a 6x4 window at z=5
        cam = Camera()
        ray = cam.generate_ray(vec([0.5, 0.5]))
        np.testing.assert_almost_equal(ray.origin, vec([0,0,10]))
        assert_direction_matches(ray.direction, vec([0,0,-1]))
        self.assertAlmostEqual(np.linalg.norm(ray.direction), 1.0)
        # v = 0 is the bottom of the window
        ray = cam.generate_ray(vec([0, 0]))
        assert_direction_matches(ray.direction, vec([-3,-2,-5]))
        ray = cam.generate_ray(vec([1, 1]))
        assert_direction_matches(ray.direction, vec([3,2,-5]))
        ray = cam.generate_ray(vec([1, 0]))
        assert_direction_matches(ray.direction, vec([3,-2,-5]))

    def test_view_plane(self):
        view = ViewPlane(vec([1, 2, 3]), 4.0, 2.0)
        np.testing.assert_allclose(view.to_world(0, 0), [1, 2, 3])
        np.testing.assert_allclose(view.to_world(0.5, 1), [3, 4, 3])

    def test_offset_eye(self):
        cam = Camera(eye=vec([1, 1, 0]), view=ViewPlane(vec([0, 0, -1]), 2.0, 2.0))
        ray = cam.generate_ray(vec([0.5, 0.5]))
        np.testing.assert_almost_equal(ray.origin, vec([1,1,0]))
        assert_direction_matches(ray.direction, vec([0,0,-1]))

    def test_defaults_not_shared(self):
        a = ViewPlane()
        b = ViewPlane()
        a.min_corner[0] = 99
        self.assertEqual(b.min_corner[0], -3)
        first = Camera()
        first.eye[2] = 0
        np.testing.assert_allclose(Camera().eye, [0, 0, 10])
        scene = Scene([])
        scene.bg_color[0] = 1
        np.testing.assert_array_equal(Scene([]).bg_color, [0, 0, 0])


class TestPointLight(unittest.TestCase):

    def shading_test(self, p, n, v, l, r, I, material, scene):
        # test with shading at p with normal n and view/illum directions v/l
        # r is distance to light, I is intensity
        t = 1.3        # arbitrary value
        d = -2.3 * v   # arbitrary scale
        ray = Ray(p - t*d, d)  # ray consistent with hit
        hit = Hit(t, p, n, Plane(p, n, material, 10, 10))
        light = PointLight(p + r * normalize(l), I)
        return light.illuminate(ray, hit, scene)

    def test_diffuse(self):
        no_spec = Material(vec([0.2,0.4,0.6]), k_s=0.)
        # light directly overhead, unit distance and intensity
        np.testing.assert_allclose(
            self.shading_test(
                vec([0,0,0]), vec([0,1,0]), vec([1, 1, 0]),  # p, n, v
                vec([0,1,0]), 1, 1.0,  # l, r, I
                no_spec, Scene([])
            ),
            vec([0.2,0.4,0.6]), rtol=1e-6
        )
        # light overhead at distance 2 with intensity 8
        np.testing.assert_allclose(
            self.shading_test(
                vec([0,0,0]), vec([0,1,0]), vec([1, 1, 0]),
                vec([0,1,0]), 2, 8.0,
                no_spec, Scene([])
            ),
            2 * vec([0.2,0.4,0.6]), rtol=1e-6
        )
        # light at 60 degrees, unit distance and intensity
        np.testing.assert_allclose(
            self.shading_test(
                vec([0,0,0]), vec([0,1,0]), vec([1, 1, 0]),
                vec([0,1,np.sqrt(3)]), 1, 1.0,
                no_spec, Scene([])
            ),
            0.5 * vec([0.2,0.4,0.6]), rtol=1e-5
        )

    def test_light_below_surface(self):
        no_spec = Material(vec([0.2,0.4,0.6]), k_s=0.)
        np.testing.assert_allclose(
            self.shading_test(
                vec([0,0,0]), vec([0,1,0]), vec([1, 1, 0]),
                vec([0,-1,0]), 1, 1.0,
                no_spec, Scene([])
            ),
            vec([0,0,0])
        )

    def test_specular(self):
        # mirror configuration: the half vector equals the normal
        black = Material(vec([0,0,0]), k_s=vec([0.5,0.5,0.5]))
        np.testing.assert_allclose(
            self.shading_test(
                vec([0,0,0]), vec([0,1,0]), vec([1, 1, 0]),
                vec([-1,1,0]), 1, 1.0,
                black, Scene([])
            ),
            vec([0.5,0.5,0.5]), rtol=1e-5
        )

    def test_default_specular_color(self):
        self.assertIs(Material(vec([1,0,0])).k_s, DEFAULT_SPECULAR)
        np.testing.assert_allclose(DEFAULT_SPECULAR, [211/255] * 3, rtol=1e-6)

    def test_coincident_light(self):
        mat = Material(vec([1,1,1]))
        point = vec([0,0,0])
        ray = Ray(vec([0,1,0]), vec([0,-1,0]))
        hit = Hit(1.0, point, vec([0,1,0]), Plane(point, vec([0,1,0]), mat, 1, 1))
        np.testing.assert_allclose(PointLight(point, 1.0).illuminate(ray, hit, Scene([])), [0,0,0])


class TestShadows(unittest.TestCase):

    def setUp(self):
        self.mat = Material(vec([0.5,0.5,0.5]), k_s=0.)
        self.floor = Plane(vec([0,0,0]), vec([0,1,0]), self.mat, 100, 100)
        self.blocker = Sphere(vec([0,5,0]), 1.0, Material(vec([1,0,0])))
        self.overhead = PointLight(vec([0,10,0]), 100.0)
        self.side = PointLight(vec([10,10,0]), 200.0)
        self.ray = Ray(vec([0,3,3]), normalize(vec([0,-3,-3])))

    def floor_hit(self, scene):
        hit = scene.intersect(self.ray)
        self.assertIs(hit.surface, self.floor)
        return hit

    def test_occluder_blocks_light(self):
        scene = Scene([self.floor, self.blocker])
        hit = self.floor_hit(scene)
        np.testing.assert_allclose(self.overhead.illuminate(self.ray, hit, scene), [0,0,0])
        # the side light passes well clear of the sphere
        np.testing.assert_allclose(self.side.illuminate(self.ray, hit, scene),
                                   0.5 * 200.0 / 200.0 * np.cos(np.pi/4) * np.ones(3), rtol=1e-5)

    def test_removing_occluder_restores_light(self):
        scene = Scene([self.floor])
        hit = self.floor_hit(scene)
        np.testing.assert_allclose(self.overhead.illuminate(self.ray, hit, scene),
                                   0.5 * 100.0 / 100.0 * np.ones(3), rtol=1e-5)

    def test_non_casting_surface(self):
        self.blocker.casts_shadow = False
        scene = Scene([self.floor, self.blocker])
        hit = self.floor_hit(scene)
        np.testing.assert_allclose(self.overhead.illuminate(self.ray, hit, scene),
                                   0.5 * np.ones(3), rtol=1e-5)

    def test_occluder_beyond_light(self):
        scene = Scene([self.floor, Sphere(vec([0,20,0]), 1.0, self.mat)])
        hit = self.floor_hit(scene)
        np.testing.assert_allclose(self.overhead.illuminate(self.ray, hit, scene),
                                   0.5 * np.ones(3), rtol=1e-5)

    def test_no_self_shadowing(self):
        # order in the scene list does not matter
        scene = Scene([self.blocker, self.floor])
        ray = Ray(vec([0,5,10]), vec([0,0,-1]))
        hit = scene.intersect(ray)
        self.assertIs(hit.surface, self.blocker)
        contribution = PointLight(vec([0,5,20]), 100.0).illuminate(ray, hit, scene)
        self.assertTrue(np.all(contribution > 0))

    def test_is_occluded(self):
        scene = Scene([self.floor, self.blocker])
        ray = Ray(vec([0,0,0]), vec([0,1,0]), end=10.0)
        self.assertTrue(scene.is_occluded(ray))
        self.assertFalse(scene.is_occluded(ray, exclude=self.blocker))
        self.assertFalse(Scene([]).is_occluded(ray))


class TestShade(unittest.TestCase):

    def setUp(self):
        self.mat = Material(vec([0.2,0.4,0.6]), k_s=0.)
        self.floor = Plane(vec([0,0,0]), vec([0,1,0]), self.mat, 100, 100)
        self.scene = Scene([self.floor])
        self.ray = Ray(vec([0,1,0]), vec([0,-1,0]))
        self.hit = self.scene.intersect(self.ray)

    def test_ambient_only(self):
        np.testing.assert_allclose(shade(self.ray, self.hit, self.scene, []),
                                   AMBIENT_COEFFICIENT * vec([0.2,0.4,0.6]), rtol=1e-6)

    def test_ambient_once_with_many_lights(self):
        lights = [PointLight(vec([0,2,0]), 0.0) for _ in range(3)]
        np.testing.assert_allclose(shade(self.ray, self.hit, self.scene, lights),
                                   AMBIENT_COEFFICIENT * vec([0.2,0.4,0.6]), rtol=1e-6)

    def test_lights_add(self):
        lights = [PointLight(vec([0,2,0]), 4.0), PointLight(vec([0,4,0]), 16.0)]
        np.testing.assert_allclose(shade(self.ray, self.hit, self.scene, lights, ambient=0.),
                                   2 * vec([0.2,0.4,0.6]), rtol=1e-5)

    def test_intensity_scale(self):
        lights = [PointLight(vec([0,2,0]), 4.0)]
        np.testing.assert_allclose(
            shade(self.ray, self.hit, self.scene, lights, intensity_scale=0.5, ambient=0.),
            0.5 * vec([0.2,0.4,0.6]), rtol=1e-5)

    def test_trace_ray_sky(self):
        lights = [PointLight(vec([0,10,0]), 100.0)]
        scene = Scene([self.floor], bg_color=vec([0.1,0.2,0.3]))
        color = trace_ray(Ray(vec([0,1,0]), vec([0,1,0])), scene, lights)
        np.testing.assert_allclose(color, [0.1,0.2,0.3])

    def test_trace_ray_clamps(self):
        lights = [PointLight(vec([0,2,0]), 1000.0)]
        color = trace_ray(self.ray, self.scene, lights)
        self.assertLessEqual(np.max(color), 1.0)
        self.assertGreaterEqual(np.min(color), 0.0)


class TestRenderImage(unittest.TestCase):

    def setUp(self):
        self.wall_mat = Material(vec([0.2,0.4,0.6]))
        self.ball_mat = Material(vec([0.8,0.1,0.1]))
        # the wall fills the whole view, the ball sits in front of it
        self.wall = Plane(vec([0,0,-10]), vec([0,0,1]), self.wall_mat, 1000, 1000)
        self.ball = Sphere(vec([0,0,0]), 1.0, self.ball_mat)
        self.scene = Scene([self.wall, self.ball])
        self.camera = Camera()

    def test_shape_and_range(self):
        lights = [PointLight(vec([0,0,20]), 400.0)]
        img = render_image(self.camera, self.scene, lights, 6, 4)
        self.assertEqual(img.shape, (4, 6, 3))
        self.assertEqual(img.dtype, np.float32)
        self.assertTrue(np.all(img >= 0) and np.all(img <= 1))

    def test_zero_intensity_is_ambient_only(self):
        lights = [PointLight(vec([0,10,10]), 0.0), PointLight(vec([5,5,5]), 0.0)]
        img = render_image(self.camera, self.scene, lights, 9, 6)
        wall_ambient = AMBIENT_COEFFICIENT * self.wall_mat.k_d
        ball_ambient = AMBIENT_COEFFICIENT * self.ball_mat.k_d
        for i in range(img.shape[0]):
            for j in range(img.shape[1]):
                pixel = img[i, j]
                self.assertTrue(np.allclose(pixel, wall_ambient, atol=1e-6)
                                or np.allclose(pixel, ball_ambient, atol=1e-6), (i, j, pixel))
        # the ball is in the middle of the image
        np.testing.assert_allclose(img[3, 4], ball_ambient, atol=1e-6)
        np.testing.assert_allclose(img[0, 0], wall_ambient, atol=1e-6)

    def test_top_row_is_top_of_view(self):
        # a wall covering only y > 0
        upper = Plane(vec([0,50,-10]), vec([0,0,1]), self.wall_mat, 1000, 100)
        img = render_image(self.camera, Scene([upper]), [], 4, 4)
        self.assertTrue(np.all(img[:2] > 0))
        np.testing.assert_array_equal(img[2:], 0)

    def test_empty_scene_is_background(self):
        scene = Scene([], bg_color=vec([0.1,0.2,0.3]))
        img = render_image(self.camera, scene, [PointLight(vec([0,10,0]), 1.0)], 3, 2)
        np.testing.assert_allclose(img, np.broadcast_to(vec([0.1,0.2,0.3]), (2, 3, 3)))

    def test_sky_pixels_are_background(self):
        # ground plane below the eye with a light overhead; looking up sees nothing
        ground = Plane(vec([0,-5,0]), vec([0,1,0]), self.wall_mat, 600, 400)
        camera = Camera(eye=vec([0,0,0]), view=ViewPlane(vec([-1,1,-1]), 2.0, 2.0))
        img = render_image(camera, Scene([ground]), [PointLight(vec([0,10,0]), 100.0)], 3, 3)
        np.testing.assert_array_equal(img, 0)

    def test_zero_resolution(self):
        img = render_image(self.camera, self.scene, [], 0, 5)
        self.assertEqual(img.shape, (5, 0, 3))
        img = render_image(self.camera, self.scene, [], 4, -1)
        self.assertEqual(img.shape, (0, 4, 3))

    def test_degenerate_plane_renders_background(self):
        mat = Material(vec([0.5,0.5,0.5]))
        scene = Scene([Plane(vec([0,0,0]), vec([0,0,0]), mat, 10, 10)], bg_color=vec([0.1,0.2,0.3]))
        img = render_image(self.camera, scene, [PointLight(vec([0,10,0]), 100.0)], 2, 2)
        np.testing.assert_allclose(img, np.broadcast_to(vec([0.1,0.2,0.3]), (2, 2, 3)))
        # a degenerate plane never blocks light either
        ray = Ray(vec([0,0,0]), vec([0,1,0]), end=10.0)
        self.assertFalse(scene.is_occluded(ray))

    def test_shadow_in_render(self):
        lights = [PointLight(vec([0,0,20]), 400.0)]
        lit = render_image(self.camera, Scene([self.wall]), lights, 9, 6)
        shadowed = render_image(self.camera, self.scene, lights, 9, 6)
        # corners see the wall in both renders, unaffected by the ball
        np.testing.assert_allclose(lit[0, 0], shadowed[0, 0])
        self.assertGreater(lit[0, 0, 2], AMBIENT_COEFFICIENT * 0.6)

    def test_parallel_matches_serial(self):
        lights = [PointLight(vec([3,4,20]), 400.0)]
        serial = render_image(self.camera, self.scene, lights, 8, 5)
        parallel = render_image(self.camera, self.scene, lights, 8, 5, processes=2)
        np.testing.assert_array_equal(serial, parallel)


if __name__ == '__main__':
    unittest.main()
