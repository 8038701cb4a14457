"""Seeded 2D Perlin gradient noise over numpy coordinate arrays."""

import numpy as np


# Unit and diagonal gradient directions of improved Perlin noise in 2D.
_GRADIENTS = np.array([
    [1, 1], [-1, 1], [1, -1], [-1, -1],
    [1, 0], [-1, 0], [0, 1], [0, -1],
], dtype=np.float64)


class PerlinNoise:
    """
    Coherent gradient noise with a permutation table derived from a seed.

    Values lie roughly in [-1, 1] and are exactly 0 on integer lattice points.
    """

    def __init__(self, seed: int):
        rng = np.random.default_rng(seed)
        perm = rng.permutation(256)
        self.perm = np.concatenate([perm, perm])

    @staticmethod
    def _fade(t: np.ndarray) -> np.ndarray:
        return t * t * t * (t * (t * 6 - 15) + 10)

    def _gradient_dot(self, ix: np.ndarray, iy: np.ndarray,
                      dx: np.ndarray, dy: np.ndarray) -> np.ndarray:
        h = self.perm[self.perm[ix] + iy] % len(_GRADIENTS)
        g = _GRADIENTS[h]
        return g[..., 0] * dx + g[..., 1] * dy

    def sample(self, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
        """Evaluate noise at each (xs, ys) pair; arrays must share a shape."""
        xs = np.asarray(xs, dtype=np.float64)
        ys = np.asarray(ys, dtype=np.float64)

        x0 = np.floor(xs)
        y0 = np.floor(ys)
        fx = xs - x0
        fy = ys - y0
        ix = x0.astype(np.int64) & 255
        iy = y0.astype(np.int64) & 255
        ix1 = (ix + 1) & 255
        iy1 = (iy + 1) & 255

        n00 = self._gradient_dot(ix, iy, fx, fy)
        n10 = self._gradient_dot(ix1, iy, fx - 1, fy)
        n01 = self._gradient_dot(ix, iy1, fx, fy - 1)
        n11 = self._gradient_dot(ix1, iy1, fx - 1, fy - 1)

        u = self._fade(fx)
        v = self._fade(fy)
        nx0 = n00 + u * (n10 - n00)
        nx1 = n01 + u * (n11 - n01)
        return nx0 + v * (nx1 - nx0)

    def grid(self, width: int, height: int, scale: float) -> np.ndarray:
        """Sample a (height, width) field at (x * scale, y * scale)."""
        ys, xs = np.mgrid[0:height, 0:width]
        return self.sample(xs * scale, ys * scale)
