"""
Convolution (blur) operator and the kernels it uses.

Uniform     - Gaussian kernel, separable, sigma computed by OpenCV from the size.
Directional - a line of equal weights through the centre at the given angle (motion blur).

Both kernels are (2*radius+1) x (2*radius+1) and sum to 1.
"""

import math
from enum import Enum

import cv2
import numpy as np

from .constants import C
from .errors import ParameterError
from .operator import Operator, clamp, to_float, to_int
from .port import Port, DataKind
from .buffer import PixelBuffer


class BlurMode(Enum):
    UNIFORM     = "Uniform"
    DIRECTIONAL = "Directional"


def uniform_kernel(radius):
    k = 2*radius + 1
    g = cv2.getGaussianKernel(k, 0, ktype=cv2.CV_64F)      # k x 1
    kernel = g @ g.T
    return kernel / kernel.sum()


def directional_kernel(radius, angle):
    """angle is in degrees. Overlapping cells from rounding accumulate before normalization."""
    k = 2*radius + 1
    kernel = np.zeros((k, k), dtype=np.float64)
    c = (k-1) / 2
    theta = math.radians(angle)
    dx, dy = math.cos(theta), math.sin(theta)
    for t in range(-radius, radius+1):
        x = int(round(c + dx*t))
        y = int(round(c + dy*t))
        if 0 <= x < k and 0 <= y < k:
            kernel[y, x] += 1
    return kernel / kernel.sum()


def make_kernel(mode, radius, angle=0.0):
    if mode == BlurMode.UNIFORM:
        return uniform_kernel(radius)
    return directional_kernel(radius, angle)


def convolve(buf, kernel):
    """Convolve every channel with kernel. Returns a new buffer."""
    return PixelBuffer(cv2.filter2D(buf.img, -1, kernel.astype(np.float32),
                                    borderType=cv2.BORDER_REFLECT_101))


def blend(blurred, original, amount):
    """amount*blurred + (1-amount)*original"""
    return PixelBuffer(cv2.addWeighted(blurred.img, amount, original.img, 1.0-amount, 0))


class Blur(Operator):
    title = "Blur"
    parameters = ('radius', 'mode', 'angle', 'amount')

    def __init__(self, name=None):
        super().__init__(name)
        self.inputs.append(Port.input(DataKind.IMAGE, "Input", required=True))
        self.inputs.append(Port.input(DataKind.PARAMETER, "amount"))
        self.outputs.append(Port.output(DataKind.IMAGE, "Output"))
        self.radius = C.DEFAULT_RADIUS
        self.mode = BlurMode.UNIFORM
        self.angle = C.DEFAULT_ANGLE
        self.amount = C.DEFAULT_AMOUNT

    def set_radius(self, radius):
        self.radius = clamp(to_int('radius', radius), C.RADIUS_MIN, C.RADIUS_MAX)
        self.mark_dirty()

    def set_mode(self, mode):
        """mode may be a BlurMode, its name ('Uniform', 'directional') or its index (0, 1)"""
        if isinstance(mode, BlurMode):
            self.mode = mode
        elif isinstance(mode, str):
            for m in BlurMode:
                if mode.lower() in (m.value.lower(), m.name.lower()):
                    self.mode = m
                    break
            else:
                raise ParameterError(f"unknown blur mode {mode!r}")
        elif isinstance(mode, int) and 0 <= mode < len(BlurMode):
            self.mode = list(BlurMode)[mode]
        else:
            raise ParameterError(f"unknown blur mode {mode!r}")
        self.mark_dirty()

    def set_angle(self, angle):
        angle = to_float('angle', angle)
        if math.isinf(angle):
            raise ParameterError("angle must be finite")
        self.angle = angle % C.ANGLE_WRAP
        self.mark_dirty()

    def set_amount(self, amount):
        self.amount = clamp(to_float('amount', amount), C.AMOUNT_MIN, C.AMOUNT_MAX)
        self.mark_dirty()

    @property
    def kernel(self):
        """The kernel for the current settings."""
        return make_kernel(self.mode, self.radius, self.angle)

    def compute(self):
        img = self.input_value(0)
        amount = self.parameter_input(1, self.amount, to_float, C.AMOUNT_MIN, C.AMOUNT_MAX)
        if img is None:
            self.outputs[0].value = None
            return
        blurred = convolve(img, self.kernel)
        self.outputs[0].value = blend(blurred, img, amount)
