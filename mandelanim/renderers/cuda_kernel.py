# CUDA port of the escape-time colorizer. One thread per pixel; the arithmetic
# mirrors mandelanim.color so frames match the CPU renderers.

import math

import numpy as np
from numba import cuda


@cuda.jit(device=True)
def _channel(v):
    return int(min(max(v * 255.0, 0.0), 255.0))


@cuda.jit(device=True)
def _hsv_to_rgb(h, s, v):
    h = ((h % 360.0) + 360.0) % 360.0
    c = v * s
    x = c * (1.0 - abs((h / 60.0) % 2.0 - 1.0))
    m = v - c
    if h < 60.0:
        r1, g1, b1 = c, x, 0.0
    elif h < 120.0:
        r1, g1, b1 = x, c, 0.0
    elif h < 180.0:
        r1, g1, b1 = 0.0, c, x
    elif h < 240.0:
        r1, g1, b1 = 0.0, x, c
    elif h < 300.0:
        r1, g1, b1 = x, 0.0, c
    else:
        r1, g1, b1 = c, 0.0, x
    return _channel(r1 + m), _channel(g1 + m), _channel(b1 + m)


@cuda.jit
def mandelbrot_kernel(center_x, center_y, scale, width, height, max_iter, out):
    px, py = cuda.grid(2)
    if px >= width or py >= height:
        return

    cx = (px - width / 2.0) * scale + center_x
    cy = (py - height / 2.0) * scale + center_y

    zr = 0.0
    zi = 0.0
    n = 0
    while n < max_iter and zr * zr + zi * zi <= 4.0:
        zr, zi = zr * zr - zi * zi + cx, zr * zi + zi * zr + cy
        n += 1

    if n >= max_iter:
        out[py, px, 0] = 0
        out[py, px, 1] = 0
        out[py, px, 2] = 0
        return

    zn = math.sqrt(zr * zr + zi * zi)
    smooth = n + 1.0 - math.log(math.log(zn)) / math.log(2.0)
    t = min(max(smooth / max_iter, 0.0), 1.0)
    hue = (360.0 * (0.65 + 2.2 * t)) % 360.0
    val = min(max(0.25 + 0.85 * t, 0.0), 1.0)
    r, g, b = _hsv_to_rgb(hue, 0.95, val)
    out[py, px, 0] = r
    out[py, px, 1] = g
    out[py, px, 2] = b


def render_gpu_frame(center, scale, width, height, max_iter):
    """
    center: (re, im) as Python floats
    scale:  complex-plane units per pixel
    Returns a (height, width, 3) uint8 array copied back from the device.
    """
    center_x, center_y = center

    out_device = cuda.device_array((height, width, 3), dtype=np.uint8)

    threads_per_block = (16, 16)
    blocks_x = math.ceil(width / threads_per_block[0])
    blocks_y = math.ceil(height / threads_per_block[1])

    mandelbrot_kernel[(blocks_x, blocks_y), threads_per_block](
        float(center_x),
        float(center_y),
        float(scale),
        int(width),
        int(height),
        int(max_iter),
        out_device,
    )
    return out_device.copy_to_host()
