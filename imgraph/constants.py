"""Constants"""

# pylint: disable=too-few-public-methods
class C:
    """Constants"""
    BRIGHTNESS_MIN = -100
    BRIGHTNESS_MAX = 100
    CONTRAST_MIN = 0.0
    CONTRAST_MAX = 3.0
    RADIUS_MIN = 1
    RADIUS_MAX = 20
    AMOUNT_MIN = 0.0
    AMOUNT_MAX = 1.0
    ANGLE_WRAP = 360.0

    DEFAULT_BRIGHTNESS = 0
    DEFAULT_CONTRAST = 1.0
    DEFAULT_RADIUS = 1
    DEFAULT_ANGLE = 0.0
    DEFAULT_AMOUNT = 1.0

    FORMAT_PNG = 'PNG'
    FORMAT_JPG = 'JPG'
    FORMATS = {'PNG':'.png', 'JPG':'.jpg', 'JPEG':'.jpg'}
    DEFAULT_FORMAT = 'PNG'
    DEFAULT_QUALITY = 95
    QUALITY_MIN = 0
    QUALITY_MAX = 100

    CHANNELS = 3
