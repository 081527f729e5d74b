import time
from multiprocessing import Pool, cpu_count

import numpy as np
from geometry import no_hit
from utils import *

"""
Core implementation of the ray tracer. This module contains the classes (Ray, Camera,
PointLight, Scene) and functions (shade, trace_ray) used in the rendering algorithm,
and the main entry point `render_image`. The surfaces themselves live in geometry.py.

As elsewhere in this code, writing a tuple for an argument type means a NumPy array of
that shape. Callers are expected to meet these preconditions.
"""

# fixed fill light, applied once per pixel
AMBIENT_COEFFICIENT = 0.05
# offset along the shadow ray to keep a point from shadowing itself
SHADOW_BIAS = 1e-4
# default Phong exponent
DEFAULT_P = 100.0


class Ray:

    def __init__(self, origin, direction, start=0., end=np.inf):
        """Create a ray with the given origin and direction.

        Parameters:
          origin : (3,) -- the start point of the ray, a 3D point
          direction : (3,) -- the direction of the ray, a 3D vector (unit length)
          start, end : float -- the open interval of t values where intersections count
        """
        # Convert these vectors to double to help ensure intersection
        # computations will be done in double precision
        self.origin = np.array(origin, np.float64)
        self.direction = np.array(direction, np.float64)
        self.start = start
        self.end = end

    def at(self, t):
        """Return the point at parameter t along the ray."""
        return self.origin + t * self.direction


class ViewPlane:

    def __init__(self, min_corner=vec([-3, -2, 5]), width=6.0, height=4.0):
        """Create the rectangle in front of the eye that the image maps onto.

        Parameters:
          min_corner : (3,) -- the bottom left corner of the rectangle
          width, height : float -- the rectangle's extent along x and y
        """
        self.min_corner = np.array(min_corner)
        self.width = width
        self.height = height

    def to_world(self, u, v):
        """Convert (u, v) in [0,1] x [0,1] to a point on the rectangle."""
        return self.min_corner + vec([u * self.width, v * self.height, 0])


class Camera:

    def __init__(self, eye=vec([0, 0, 10]), view=None):
        """Create a camera looking through a view plane.

        Parameters:
          eye : (3,) -- the camera's location, aka viewpoint (a 3D point)
          view : ViewPlane -- the rectangle the image maps onto
        """
        self.eye = np.array(eye)
        self.view = view if view is not None else ViewPlane()

    def generate_ray(self, img_point):
        """Compute the ray corresponding to a point in the image.

        Parameters:
          img_point : (2,) -- a 2D point in [0,1] x [0,1], where (0,0) is the lower left
                      corner of the image and (1,1) is the upper right.
        Return:
          Ray -- the ray from the eye through that image location
        """
        point_on_plane = self.view.to_world(img_point[0], img_point[1])
        return Ray(self.eye, normalize(point_on_plane - self.eye))


class PointLight:

    def __init__(self, position, intensity):
        """Create a point light at given position and with given intensity

        Parameters:
          position : (3,) -- 3D point giving the light source location in scene
          intensity : float -- scalar intensity of the source
        """
        self.position = np.array(position)
        self.intensity = intensity

    def illuminate(self, ray, hit, scene, p=DEFAULT_P, intensity_scale=1.0):
        """Compute the shading at a surface point due to this light.

        Parameters:
          ray : Ray -- the ray that hit the surface
          hit : Hit -- the hit data
          scene : Scene -- the scene, for shadow rays
          p : float -- the specular exponent
          intensity_scale : float -- global multiplier on the light's intensity
        Return:
          (3,) -- the diffuse plus specular light reflected from the surface
        """
        light_vec_full = self.position - hit.point
        dist_sq = np.dot(light_vec_full, light_vec_full)
        if dist_sq < SHADOW_BIAS * SHADOW_BIAS:
            return np.zeros(3)

        dist = np.sqrt(dist_sq)
        light_vec = light_vec_full / dist
        shadow_ray = Ray(
            origin=hit.point + SHADOW_BIAS * light_vec,
            direction=light_vec,
            end=dist - SHADOW_BIAS
        )
        if scene.is_occluded(shadow_ray, exclude=hit.surface):
            return np.zeros(3)

        normal_hit = hit.normal
        view_vec = normalize(ray.origin - hit.point)
        halfway_vec = normalize(light_vec + view_vec)

        k_d = hit.material.k_d
        k_s = hit.material.k_s

        intensity_attenuated = self.intensity * intensity_scale / dist_sq

        diffuse = max(0.0, np.dot(normal_hit, light_vec))
        specular = max(0.0, np.dot(normal_hit, halfway_vec)) ** p

        return (k_d * diffuse + k_s * specular) * intensity_attenuated


class Scene:

    def __init__(self, surfs, bg_color=vec([0, 0, 0])):
        """Create a scene containing the given objects.

        Parameters:
          surfs : [Plane, Sphere] -- list of the surfaces in the scene
          bg_color : (3,) -- RGB color that is seen where no objects appear
        """
        self.surfs = surfs
        self.bg_color = np.array(bg_color)

    def intersect(self, ray):
        """Computes the first (smallest t) intersection between a ray and the scene.

        Parameters:
          ray : Ray -- the ray to intersect with the scene
        Return:
          Hit -- the hit data
        """
        closest_hit = no_hit

        for surf in self.surfs:
            hit = surf.intersect(ray)

            if hit.t < closest_hit.t and hit.t > ray.start:
                closest_hit = hit

        return closest_hit

    def is_occluded(self, ray, exclude=None):
        """Return True if any shadow-casting surface other than `exclude` blocks the ray."""
        for surf in self.surfs:
            if surf is exclude or not surf.casts_shadow:
                continue
            hit = surf.intersect(ray)
            if hit.t > ray.start and hit.t < ray.end:
                return True
        return False


def shade(ray, hit, scene, lights, p=DEFAULT_P, intensity_scale=1.0, ambient=AMBIENT_COEFFICIENT):
    """Compute shading for a ray-surface intersection.

    Parameters:
      ray : Ray -- the ray that hit the surface
      hit : Hit -- the hit data
      scene : Scene -- the scene
      lights : [PointLight] -- the lights
      p : float -- the specular exponent
      intensity_scale : float -- global multiplier on every light's intensity
      ambient : float -- the ambient coefficient
    Return:
      (3,) -- the color seen along this ray, not yet clamped
    """
    color = hit.material.k_d * ambient

    for light in lights:
        color = color + light.illuminate(ray, hit, scene, p, intensity_scale)

    return color


def trace_ray(ray, scene, lights, p=DEFAULT_P, intensity_scale=1.0, ambient=AMBIENT_COEFFICIENT):
    """Return the displayable color seen along a primary ray."""
    hit = scene.intersect(ray)
    if hit.t == np.inf:
        return scene.bg_color
    return np.clip(shade(ray, hit, scene, lights, p, intensity_scale, ambient), 0, 1)


def render_row(i, camera, scene, lights, nx, ny, p=DEFAULT_P, intensity_scale=1.0,
               ambient=AMBIENT_COEFFICIENT):
    """Render image row i (counted from the top) into an (nx, 3) array."""
    row = np.zeros((nx, 3), np.float32)
    # image rows run top to bottom, the view plane bottom to top
    v = 1.0 - (i + 0.5) / ny
    for j in range(nx):
        u = (j + 0.5) / nx
        ray = camera.generate_ray(np.array([u, v]))
        row[j] = trace_ray(ray, scene, lights, p, intensity_scale, ambient)
    return row


# Global state for pool workers (set by the initializer)
_worker_data = {}

def _init_worker(data):
    _worker_data.update(data)

def _render_row_worker(i):
    return i, render_row(i, **_worker_data)


def render_image(camera, scene, lights, nx, ny, p=DEFAULT_P, intensity_scale=1.0,
                 ambient=AMBIENT_COEFFICIENT, processes=None, verbose=False):
    """Render a ray traced image.

    Parameters:
      camera : Camera -- the camera defining the view
      scene : Scene -- the scene to be rendered
      lights : [PointLight] -- the lights illuminating the scene
      nx, ny : int -- the dimensions of the rendered image
      p : float -- the specular exponent
      intensity_scale : float -- global multiplier on every light's intensity
      ambient : float -- the ambient coefficient
      processes : int -- render rows in this many worker processes (serial if None or 1)
      verbose : bool -- print progress
    Returns:
      (ny, nx, 3) float32 -- the RGB image, every channel in [0, 1]
    """
    nx = max(0, int(nx))
    ny = max(0, int(ny))
    output_image = np.zeros((ny, nx, 3), np.float32)
    if nx == 0 or ny == 0:
        return output_image

    settings = dict(camera=camera, scene=scene, lights=lights, nx=nx, ny=ny,
                    p=p, intensity_scale=intensity_scale, ambient=ambient)
    start_time = time.time()

    if processes is not None and processes > 1:
        processes = min(processes, cpu_count(), ny)
        if verbose:
            print(f"rendering with {processes} processes...")
        with Pool(processes=processes, initializer=_init_worker, initargs=(settings,)) as pool:
            for i, row in pool.imap_unordered(_render_row_worker, range(ny)):
                output_image[i] = row
    else:
        for i in range(ny):
            if verbose:
                print(f"rendering row {i+1}/{ny}...")
            output_image[i] = render_row(i, **settings)

    if verbose:
        print(f"render complete in {time.time() - start_time:.2f} seconds")
    return output_image
