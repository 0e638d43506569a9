"""
Point transforms.
"""

import numpy as np

from .constants import C
from .operator import Operator, clamp, to_float, to_int
from .port import Port, DataKind
from .buffer import PixelBuffer


def brightness_contrast(buf, brightness, contrast):
    """Return a new buffer with out = clamp(in*contrast + brightness, 0, max) for every channel"""
    out = buf.img.astype(np.float32) * contrast + brightness
    out = np.clip(np.rint(out), 0, buf.max_value).astype(buf.img.dtype)
    return PixelBuffer(out)


class BrightnessContrast(Operator):
    """Per-pixel affine map. The brightness and contrast inputs, when connected, override the settings."""
    title = "Brightness/Contrast"
    parameters = ('brightness', 'contrast')

    def __init__(self, name=None):
        super().__init__(name)
        self.inputs.append(Port.input(DataKind.IMAGE, "Input", required=True))
        self.inputs.append(Port.input(DataKind.PARAMETER, "brightness"))
        self.inputs.append(Port.input(DataKind.PARAMETER, "contrast"))
        self.outputs.append(Port.output(DataKind.IMAGE, "Output"))
        self.brightness = C.DEFAULT_BRIGHTNESS
        self.contrast = C.DEFAULT_CONTRAST

    def set_brightness(self, brightness):
        self.brightness = clamp(to_int('brightness', brightness), C.BRIGHTNESS_MIN, C.BRIGHTNESS_MAX)
        self.mark_dirty()

    def set_contrast(self, contrast):
        self.contrast = clamp(to_float('contrast', contrast), C.CONTRAST_MIN, C.CONTRAST_MAX)
        self.mark_dirty()

    def compute(self):
        img = self.input_value(0)
        brightness = self.parameter_input(1, self.brightness, to_int, C.BRIGHTNESS_MIN, C.BRIGHTNESS_MAX)
        contrast = self.parameter_input(2, self.contrast, to_float, C.CONTRAST_MIN, C.CONTRAST_MAX)
        if img is None:
            self.outputs[0].value = None
            return
        self.outputs[0].value = brightness_contrast(img, brightness, contrast)
