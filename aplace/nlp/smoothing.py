# (c) APLACE developers 2025
# For the APLACE Project.
# Licensed under the MIT License (see LICENSE.txt).

"""
Smooth approximations of max, max(0, t) and |t| used by the differentiable operators.
All of them are total functions: no overflow, no division by zero.
"""

import math

import numpy as np
import numpy.typing as npt

# Smoothing of |t| near zero (optimizer units)
ABS_EPSILON = 1e-3


def log_sum_exp(v: npt.NDArray[np.float64], alpha: float) -> float:
    """
    alpha * ln(sum(exp(v_i / alpha))), computed with the max shifted out
    :param v: values
    :param alpha: smoothing parameter (> 0)
    :return: a smooth upper bound of max(v)
    """
    m = float(np.max(v))
    return m + alpha * math.log(float(np.sum(np.exp((v - m) / alpha))))


def softmax(v: npt.NDArray[np.float64], alpha: float) -> npt.NDArray[np.float64]:
    """
    Gradient of log_sum_exp(v, alpha) with respect to v
    :param v: values
    :param alpha: smoothing parameter (> 0)
    :return: the weights exp(v_i / alpha) / sum(exp(v_j / alpha))
    """
    e = np.exp((v - np.max(v)) / alpha)
    return e / np.sum(e)


def lse_wirelength(v: npt.NDArray[np.float64], alpha: float) -> tuple[float, npt.NDArray[np.float64]]:
    """
    Log-sum-exp approximation of max(v) - min(v) and its gradient
    :param v: coordinates of the pins in one dimension
    :param alpha: smoothing parameter (> 0)
    :return: the value and the gradient with respect to v
    """
    value = log_sum_exp(v, alpha) + log_sum_exp(-v, alpha)
    grad = softmax(v, alpha) - softmax(-v, alpha)
    return value, grad


def smooth_hinge(t: float, delta: float) -> float:
    """
    C1 approximation of max(0, t): 0 for t <= 0, t^2/(2 delta) in (0, delta), t - delta/2 beyond.
    It is exactly zero in the non-positive region.
    """
    if t <= 0.0:
        return 0.0
    if t < delta:
        return t * t / (2.0 * delta)
    return t - delta / 2.0


def smooth_hinge_derivative(t: float, delta: float) -> float:
    """Derivative of smooth_hinge"""
    if t <= 0.0:
        return 0.0
    if t < delta:
        return t / delta
    return 1.0


def smooth_abs(t: float, eps: float = ABS_EPSILON) -> float:
    """Differentiable approximation of |t| (equal to |t| when |t| >= eps)"""
    a = abs(t)
    if a >= eps:
        return a
    return t * t / (2.0 * eps) + eps / 2.0


def smooth_abs_derivative(t: float, eps: float = ABS_EPSILON) -> float:
    """Derivative of smooth_abs"""
    if t >= eps:
        return 1.0
    if t <= -eps:
        return -1.0
    return t / eps
