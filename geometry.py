import numpy as np
from utils import vec, normalize

class Hit:
    def __init__(self, t, point=None, normal=None, surface=None, inside=True):
        """Create a Hit with the given data.

        Parameters:
          t : float -- the t value of the intersection along the ray
          point : (3,) -- the 3D point where the intersection happens
          normal : (3,) -- the 3D outward-facing unit normal to the surface at the hit point
          surface : (Plane or Sphere) -- the surface that was hit
          inside : bool -- whether the point lies within the surface's bounded extent
        """
        self.t = t
        self.point = point
        self.normal = normal
        self.surface = surface
        self.inside = inside

    @property
    def material(self):
        return self.surface.material

# Value to represent absence of an intersection
no_hit = Hit(np.inf)


class Plane:

    def __init__(self, position, normal, material, width, height, casts_shadow=True):
        """Create a bounded rectangle lying in a plane.

        Parameters:
          position : (3,) -- the center of the rectangle, a point on the plane
          normal : (3,) -- the plane's normal (normalized on construction)
          material : Material -- the material of the surface
          width, height : float -- the rectangle's extent along the plane's u and v axes
          casts_shadow : bool -- whether the surface can block light from other surfaces

        A zero-length normal leaves the plane degenerate: `normal` is None and
        nothing ever hits it.
        """
        self.position = np.array(position)
        self.material = material
        self.width = width
        self.height = height
        self.casts_shadow = casts_shadow

        if np.linalg.norm(normal) == 0:
            self.normal = self.u = self.v = None
            return
        self.normal = normalize(np.array(normal))

        # width runs along x for floors and for walls facing z
        if np.abs(self.normal[1]) < 0.999:
            up = vec([0, 1, 0])
        else:
            up = vec([0, 0, 1])
        self.u = normalize(np.cross(up, self.normal))
        self.v = np.cross(self.normal, self.u)

    def normal_at(self, point):
        return self.normal

    def contains(self, point):
        """Test whether a point on the plane lies strictly inside the rectangle."""
        offset = point - self.position
        return (np.abs(np.dot(offset, self.u)) < self.width / 2
                and np.abs(np.dot(offset, self.v)) < self.height / 2)

    def intersect(self, ray, bounded=True):
        """Computes the intersection between a ray and this plane, if it exists.

        Parameters:
          ray : Ray -- the ray to intersect with the plane
          bounded : bool -- reject points outside the rectangle; when False the
                    hit on the infinite plane is returned with `inside` set
        Return:
          Hit -- the hit data
        """
        if self.normal is None:
            return no_hit

        denom = np.dot(ray.direction, self.normal)
        if -1e-8 < denom and denom < 1e-8:
            return no_hit

        t = np.dot(self.position - ray.origin, self.normal) / denom
        if not (ray.start < t and t < ray.end):
            return no_hit

        point = ray.at(t)
        inside = self.contains(point)
        if bounded and not inside:
            return no_hit
        return Hit(t, point, self.normal, self, inside)


class Sphere:

    def __init__(self, center, radius, material, casts_shadow=True):
        """Create a sphere with the given center and radius.

        Parameters:
          center : (3,) -- a 3D point specifying the sphere's center
          radius : float -- a Python float specifying the sphere's radius
          material : Material -- the material of the surface
          casts_shadow : bool -- whether the surface can block light from other surfaces
        """
        self.center = np.array(center)
        self.radius = radius
        self.material = material
        self.casts_shadow = casts_shadow

    def normal_at(self, point):
        return normalize(point - self.center)

    def intersect(self, ray):
        """Computes the first (smallest t) intersection between a ray and this sphere.

        A ray starting inside the sphere hits the far side. Tangent rays miss.

        Parameters:
          ray : Ray -- the ray to intersect with the sphere
        Return:
          Hit -- the hit data
        """
        sphere_vec = ray.origin - self.center
        a = np.dot(ray.direction, ray.direction)
        b = 2 * np.dot(ray.direction, sphere_vec)
        c = np.dot(sphere_vec, sphere_vec) - self.radius * self.radius
        discriminant = b * b - 4 * a * c
        if discriminant <= 0:
            return no_hit

        disc_sqrt = np.sqrt(discriminant)
        minus = (-b - disc_sqrt) / (2 * a)
        plus = (-b + disc_sqrt) / (2 * a)
        hit = None
        if ray.start < minus and minus < ray.end:
            hit = minus
        elif ray.start < plus and plus < ray.end:
            hit = plus
        if hit is None:
            return no_hit

        point = ray.at(hit)
        return Hit(hit, point, self.normal_at(point), self)
