import numpy as np
from utils import rgb

# ofColor::lightGray, used when a surface does not set its own highlight color
DEFAULT_SPECULAR = rgb(211, 211, 211)

class Material:

    def __init__(self, k_d, k_s=None):
        """
        Create a new material with the given parameters.

        Parameters:
          k_d : (3,) -- Diffuse coefficient (color)
          k_s : (3,) or float -- Specular coefficient (defaults to light gray)

        The specular exponent is not part of the material; it is a render
        setting shared by every surface.
        """
        self.k_d = np.asarray(k_d)
        self.k_s = DEFAULT_SPECULAR if k_s is None else np.asarray(k_s)
