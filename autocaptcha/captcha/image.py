#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# filename: captcha/image.py

import os
import base64
from io import BytesIO

from PIL import Image, UnidentifiedImageError

from ..const import MEDIA_TYPE_JPEG, MEDIA_TYPE_PNG
from ..exceptions import ValidationError


class ImageInput(object):

    __slots__ = ("_data", "_media_type", "_b64")

    def __init__(self, data, media_type=MEDIA_TYPE_JPEG):
        self._data = bytes(data)
        self._media_type = media_type
        self._b64 = None

    @property
    def data(self):
        return self._data

    @property
    def media_type(self):
        return self._media_type

    @property
    def b64(self):
        # encoded once, shared by every provider call
        if self._b64 is None:
            self._b64 = base64.b64encode(self._data).decode("utf-8")
        return self._b64

    @property
    def data_url(self):
        return "data:%s;base64,%s" % (self._media_type, self.b64)

    def __repr__(self):
        return "ImageInput(%s, %d bytes)" % (self._media_type, len(self._data))


def media_type_from_path(path):
    return MEDIA_TYPE_PNG if str(path).lower().endswith(".png") else MEDIA_TYPE_JPEG


def media_type_from_bytes(raw):
    try:
        im = Image.open(BytesIO(raw))
    except (UnidentifiedImageError, OSError, ValueError):
        return MEDIA_TYPE_JPEG
    with im:
        return MEDIA_TYPE_PNG if im.format == "PNG" else MEDIA_TYPE_JPEG


def load_image(source):
    """
    Resolve `source` (a byte payload or a file path) to an ImageInput.
    """
    if isinstance(source, ImageInput):
        return source
    if isinstance(source, (bytes, bytearray, memoryview)):
        raw = bytes(source)
        if not raw:
            raise ValidationError(msg="Empty image payload")
        return ImageInput(raw, media_type_from_bytes(raw))
    if isinstance(source, (str, os.PathLike)):
        path = os.fspath(source)
        if not os.path.isfile(path):
            raise ValidationError(msg="Image file was not found: %s" % path)
        with open(path, "rb") as fp:
            raw = fp.read()
        return ImageInput(raw, media_type_from_path(path))
    raise ValidationError(msg="Invalid image source %r, expected bytes or a file path" % type(source).__name__)
