from __future__ import annotations

from typing import NamedTuple, Tuple

ESCAPE_RADIUS_SQR = 4.0


class Complex(NamedTuple):
    """Double-precision complex value used by the escape-time core."""

    re: float
    im: float

    def add(self, other: "Complex") -> "Complex":
        return Complex(self.re + other.re, self.im + other.im)

    def mul(self, other: "Complex") -> "Complex":
        return Complex(
            self.re * other.re - self.im * other.im,
            self.re * other.im + self.im * other.re,
        )

    def norm_sqr(self) -> float:
        return self.re * self.re + self.im * self.im


ZERO = Complex(0.0, 0.0)


def escape(c: Complex, max_iter: int) -> Tuple[int, Complex]:
    """
    Iterate z <- z*z + c from z = 0 until |z|^2 > 4 or max_iter steps.

    Returns (n, z) with n the number of steps taken and z the last iterate.
    |z|^2 == 4 is not yet escaped; the test runs again after the next step.
    """
    # Unrolled Complex.mul/add; same operation order.
    cr, ci = c
    zr = 0.0
    zi = 0.0
    n = 0
    while n < max_iter and zr * zr + zi * zi <= ESCAPE_RADIUS_SQR:
        zr, zi = zr * zr - zi * zi + cr, zr * zi + zi * zr + ci
        n += 1
    return n, Complex(zr, zi)


def clamp(value: float, lo: float, hi: float) -> float:
    return min(max(value, lo), hi)
