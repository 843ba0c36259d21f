from __future__ import annotations

from typing import Callable, Tuple

Vector = Tuple[float, ...]
Derivative = Callable[[Vector], Vector]


def euler_step(derivative: Derivative, state: Vector, h: float) -> Vector:
    """Explicit (forward) Euler: s + h * f(s)."""
    rates = derivative(state)
    return tuple(s + d * h for s, d in zip(state, rates))


def rk4_step(derivative: Derivative, state: Vector, h: float) -> Vector:
    """Classical fourth-order Runge-Kutta step."""
    half = 0.5 * h
    k1 = derivative(state)
    k2 = derivative(tuple(s + half * d for s, d in zip(state, k1)))
    k3 = derivative(tuple(s + half * d for s, d in zip(state, k2)))
    k4 = derivative(tuple(s + h * d for s, d in zip(state, k3)))
    return tuple(
        s + (h / 6) * (a + 2 * b + 2 * c + d)
        for s, a, b, c, d in zip(state, k1, k2, k3, k4)
    )
