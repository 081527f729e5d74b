import numpy as np
import raytrace
from geometry import Plane, Sphere
from materials import Material
from utils import *

# ranges of the two knobs the viewer exposes
INTENSITY_RANGE = (0.05, 1.0)
P_RANGE = (10.0, 10000.0)
DEFAULT_INTENSITY_SCALE = 0.2
DEFAULT_OUTPUT_SHAPE = [400, 600]

class ExampleSceneDef(object):
    def __init__(self, camera, scene, lights):
        self.camera = camera;
        self.scene = scene;
        self.lights = lights;

    def render(self, output_shape=None, intensity_scale=None, p=None, gamma_correct=False,
               processes=None, verbose=False):
        """Render the scene and return it as a PIL image.

        output_shape is [rows, columns]. The knobs are clamped to the ranges the
        viewer allows. A shape with no pixels renders nothing and returns None.
        """
        if(output_shape is None):
            output_shape = DEFAULT_OUTPUT_SHAPE;
        if(intensity_scale is None):
            intensity_scale = DEFAULT_INTENSITY_SCALE;
        if(p is None):
            p = raytrace.DEFAULT_P;
        intensity_scale = float(np.clip(intensity_scale, *INTENSITY_RANGE));
        p = float(np.clip(p, *P_RANGE));
        pix = raytrace.render_image(self.camera, self.scene, self.lights,
                                    output_shape[1], output_shape[0],
                                    p=p, intensity_scale=intensity_scale,
                                    processes=processes, verbose=verbose);
        if(gamma_correct):
            return to_pil_image(to_srgb8(pix));
        return to_pil_image(to_rgb8(pix));


def DefaultScene():
    """Two bounded planes, three spheres and three lights seen from z = 10.

    Everything is rebuilt on every call, so lights can be tuned freely on the result.
    """
    ground = Material(rgb(0, 0, 139))
    wall = Material(rgb(169, 169, 169))
    purple = Material(rgb(128, 0, 128))
    blue = Material(rgb(0, 0, 255))
    green = Material(rgb(0, 128, 0))

    scene = raytrace.Scene([
        Plane(vec([0, -5, 0]), vec([0, 1, 0]), ground, 600, 400),
        Plane(vec([0, 1, -50]), vec([0, 0, 1]), wall, 600, 400),
        Sphere(vec([0, 1, -2]), 1.0, purple),
        Sphere(vec([-1, 0, 1]), 1.0, blue),
        Sphere(vec([0.5, 0, 0]), 1.0, green),
    ])

    # intensities fall off with the square of distance, so far lights are brighter
    lights = [
        raytrace.PointLight(vec([100, 150, 150]), 150000.0),
        raytrace.PointLight(vec([-200, 300, 450]), 800000.0),
        raytrace.PointLight(vec([-25, 1, 100]), 50000.0),
    ]
    camera = raytrace.Camera(vec([0, 0, 10]), raytrace.ViewPlane(vec([-3, -2, 5]), 6.0, 4.0))
    return ExampleSceneDef(camera=camera, scene=scene, lights=lights);


def SingleSphereExample(sphere_radius=1.0):
    """One sphere resting on a floor under a single overhead light."""
    gray = Material(vec([0.5, 0.5, 0.5]))
    floor = Material(vec([0.2, 0.2, 0.2]), k_s=vec([0, 0, 0]))

    scene = raytrace.Scene([
        Plane(vec([0, -sphere_radius, 0]), vec([0, 1, 0]), floor, 20, 20),
        Sphere(vec([0, 0, 0]), sphere_radius, gray),
    ])

    lights = [
        raytrace.PointLight(vec([0, 10, 0]), 500.0),
    ]
    camera = raytrace.Camera()
    return ExampleSceneDef(camera=camera, scene=scene, lights=lights);
