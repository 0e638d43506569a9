"""This module provides the following:

PixelBuffer - Holds an image as a height x width x 3 uint8 numpy array in RGB order.
              Buffers are immutable; operators that change pixels create new buffers.

load(url) - decode an image file (or s3 object) into a PixelBuffer.
save(url, buf, format, quality) - encode a PixelBuffer and write it.

Decoding and encoding are done with OpenCV. OpenCV works in BGR, so we
convert on the way in and on the way out.
"""

import logging

import cv2
import numpy as np

from .constants import C
from .errors import ImageIOError, NotImageError
from .storage import load_bytes, save_bytes

logger = logging.getLogger(__name__)


class PixelBuffer:
    """Abstraction to hold an image.
    The underlying array is not writable. If you need to draw into it, use writable_copy()."""
    __slots__ = ('_img',)

    def __init__(self, img):
        img = np.asarray(img)
        if img.ndim != 3 or img.shape[2] != C.CHANNELS:
            raise ValueError(f"PixelBuffer requires height x width x {C.CHANNELS}, got {img.shape}")
        if img.dtype != np.uint8:
            raise ValueError(f"PixelBuffer requires uint8 pixels, got {img.dtype}")
        if img.flags.writeable:
            img = img.copy()
            img.flags.writeable = False
        self._img = img

    @classmethod
    def filled(cls, *, w, h, value=0):
        """A buffer with every channel of every pixel set to value"""
        return cls(np.full((h, w, C.CHANNELS), value, dtype=np.uint8))

    def __repr__(self):
        return f"<PixelBuffer {self.width}x{self.height}>"

    def __eq__(self, b):
        if not isinstance(b, PixelBuffer):
            return NotImplemented
        return np.array_equal(self._img, b._img)

    __hash__ = None

    @property
    def img(self):
        """return the numpy array. It is not writable."""
        return self._img

    @property
    def shape(self):
        """Returns shape. note: shape[0] = height, shape[1]=width, shape[2]==depth"""
        return tuple(self._img.shape)

    @property
    def width(self):
        return self._img.shape[1]

    @property
    def height(self):
        return self._img.shape[0]

    @property
    def channels(self):
        return self._img.shape[2]

    @property
    def max_value(self):
        return int(np.iinfo(self._img.dtype).max)

    def copy(self):
        """Returns a new buffer with its own copy of the pixels"""
        img = self._img.copy()
        img.flags.writeable = False
        return PixelBuffer(img)

    def writable_copy(self):
        """Returns a numpy array into which we can write"""
        return self._img.copy()

    def show(self, title="imgraph", wait=0):
        """show the buffer, optionally waiting for keyboard"""
        cv2.namedWindow(title, 0)
        cv2.imshow(title, cv2.cvtColor(self._img, cv2.COLOR_RGB2BGR))
        cv2.waitKey(wait)


def decode(data):
    """Decode bytes into a PixelBuffer. Gray and alpha images are converted to RGB."""
    img = cv2.imdecode(np.frombuffer(data, np.uint8), cv2.IMREAD_UNCHANGED)
    if img is None:
        raise NotImageError("cannot decode image")
    if img.dtype != np.uint8:
        img = cv2.convertScaleAbs(img, alpha=255.0 / np.iinfo(img.dtype).max)
    if len(img.shape)==2:
        img = cv2.cvtColor(img, cv2.COLOR_GRAY2RGB)
    elif img.shape[2]==4:
        img = cv2.cvtColor(img, cv2.COLOR_BGRA2RGB)
    else:
        img = cv2.cvtColor(img, cv2.COLOR_BGR2RGB)
    return PixelBuffer(img)


def encode(buf, fmt=C.DEFAULT_FORMAT, quality=C.DEFAULT_QUALITY):
    """Returns the bytes of buf compressed as fmt"""
    try:
        ext = C.FORMATS[fmt.upper()]
    except KeyError as e:
        raise ImageIOError(f"unsupported format {fmt}") from e
    if ext == '.jpg':
        params = [cv2.IMWRITE_JPEG_QUALITY, int(quality)]
    else:
        params = [cv2.IMWRITE_PNG_COMPRESSION, int(quality) // 10]
    ok, data = cv2.imencode(ext, cv2.cvtColor(buf.img, cv2.COLOR_RGB2BGR), params)
    if not ok:
        raise ImageIOError(f"cannot encode image as {fmt}")
    return data.tobytes()


def load(url):
    """Read and decode the image at url"""
    logger.debug("load %s",url)
    data = load_bytes(url)
    try:
        return decode(data)
    except NotImageError as e:
        raise NotImageError(f"not an image file '{url}'") from e


def save(url, buf, fmt=C.DEFAULT_FORMAT, quality=C.DEFAULT_QUALITY):
    """Encode buf and write it to url"""
    logger.debug("save %s fmt=%s quality=%s",url,fmt,quality)
    save_bytes(url, encode(buf, fmt, quality))
