"""Numerically stable quadratic solver used by the sphere intersection test.

Solves a*t^2 + b*t + c = 0 without the catastrophic cancellation of the
textbook formula. When b and sqrt(discriminant) are close in magnitude,
(-b + sqrt(d)) loses most of its significant digits, so one root is computed
from q = -0.5 * (b + sign(b) * sqrt(d)) and the other from Vieta's relation
root0 * root1 = c / a.
"""

import taichi as ti

# Leading coefficients smaller than this describe a degenerate (linear)
# equation, which only happens for a zero-length ray direction.
DEGENERATE_A_EPSILON = 1e-12


@ti.func
def solve_quadratic(a: ti.f32, b: ti.f32, c: ti.f32):
    """Solve a*t^2 + b*t + c = 0 for real roots.

    Args:
        a: Quadratic coefficient.
        b: Linear coefficient.
        c: Constant term.

    Returns:
        Tuple of (found, root0, root1) where found is 1 if real roots exist
        and 0 otherwise. When found is 1 the roots satisfy root0 <= root1;
        for a repeated root both are equal. When found is 0 both roots are 0.
    """
    found = 0
    root0 = 0.0
    root1 = 0.0

    discriminant = b * b - 4.0 * a * c

    if ti.abs(a) >= DEGENERATE_A_EPSILON and discriminant >= 0.0:
        found = 1
        if discriminant == 0.0:
            # Repeated root
            root0 = -0.5 * b / a
            root1 = root0
        else:
            sqrt_d = ti.sqrt(discriminant)
            q = 0.0
            if b > 0.0:
                q = -0.5 * (b + sqrt_d)
            else:
                q = -0.5 * (b - sqrt_d)
            root0 = q / a
            root1 = c / q

        # Smallest root first
        if root0 > root1:
            tmp = root0
            root0 = root1
            root1 = tmp

    return found, root0, root1
