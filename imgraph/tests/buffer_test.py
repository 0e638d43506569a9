"""
Tests for PixelBuffer, load/save and the sink
"""

import pytest
import sys
import os
import tempfile

import cv2
import numpy as np
from os.path import abspath, dirname, join

sys.path.append(dirname(dirname(dirname(abspath(__file__)))))

from imgraph.buffer import PixelBuffer, load, save, decode, encode
from imgraph.graph import Graph
from imgraph.errors import ImageIOError, NotImageError, EmptyResult, ParameterError
from imgraph import storage


def test_pixel_buffer():
    buf = PixelBuffer(np.zeros((2, 3, 3), dtype=np.uint8))
    assert buf.width == 3
    assert buf.height == 2
    assert buf.channels == 3
    assert buf.shape == (2, 3, 3)
    assert buf.max_value == 255
    assert not buf.img.flags.writeable
    with pytest.raises(ValueError):
        buf.img[0, 0, 0] = 1
    w = buf.writable_copy()
    w[0, 0, 0] = 1
    assert buf.img[0, 0, 0] == 0
    assert buf.copy() == buf
    assert buf.copy().img is not buf.img


def test_pixel_buffer_rejects_bad_layout():
    with pytest.raises(ValueError):
        PixelBuffer(np.zeros((2, 2), dtype=np.uint8))
    with pytest.raises(ValueError):
        PixelBuffer(np.zeros((2, 2, 4), dtype=np.uint8))
    with pytest.raises(ValueError):
        PixelBuffer(np.zeros((2, 2, 3), dtype=np.float32))


def test_save_and_load_png():
    img = np.zeros((4, 5, 3), dtype=np.uint8)
    img[:, :, 0] = 200          # red in RGB
    buf = PixelBuffer(img)
    with tempfile.TemporaryDirectory() as td:
        path = join(td, "sub", "red.png")
        save(path, buf, 'PNG', 95)
        # written BGR on disk, so blue channel of the file is what we called red
        assert cv2.imread(path)[0, 0].tolist() == [0, 0, 200]
        assert load(path) == buf


def test_gray_is_expanded():
    ok, data = cv2.imencode('.png', np.full((3, 3), 42, dtype=np.uint8))
    assert ok
    buf = decode(data.tobytes())
    assert buf.shape == (3, 3, 3)
    assert np.all(buf.img == 42)


def test_load_errors():
    with pytest.raises(ImageIOError):
        load("/nonexistent/imgraph/no.png")
    with tempfile.NamedTemporaryFile(suffix='.png') as tf:
        tf.write(b"not an image")
        tf.flush()
        with pytest.raises(NotImageError):
            load(tf.name)
    with pytest.raises(ValueError):
        storage.load_bytes("ftp://example.com/x.png")


def test_storage_errors():
    with pytest.raises(ImageIOError):
        storage.load_bytes("file:///nonexistent/imgraph/no.png")
    with tempfile.TemporaryDirectory() as td:
        # a directory is not a file we can write bytes into
        with pytest.raises(ImageIOError):
            storage.save_bytes(td, b"data")
        with pytest.raises(ImageIOError):
            save(td, PixelBuffer.filled(w=2, h=2))
        path = join(td, "a", "b", "c.bin")
        storage.save_bytes(path, b"data")
        assert storage.load_bytes("file://" + path) == b"data"
    assert storage.split_url("s3://bucket/dir/x.png") == ('s3', 'bucket', 'dir/x.png')
    assert storage.split_url("/tmp/x.png") == ('', None, '/tmp/x.png')


def test_encode_unknown_format():
    with pytest.raises(ImageIOError):
        encode(PixelBuffer.filled(w=2, h=2), 'GIFF')


def test_source_load_and_sink_save():
    buf = PixelBuffer(np.arange(48, dtype=np.uint8).reshape((4, 4, 3)))
    g = Graph()
    source = g.add_node('source')
    sink = g.add_node('sink', {'format':'png'})
    g.connect(source, 0, sink, 0)
    with tempfile.TemporaryDirectory() as td:
        inpath = join(td, "in.png")
        outpath = join(td, "out.png")
        save(inpath, buf)
        with pytest.raises(EmptyResult):
            g.node(sink).save(outpath)
        g.node(source).load(inpath)
        assert g.node(source).dirty
        assert g.evaluate(sink) == buf
        g.node(sink).save(outpath)
        assert os.path.exists(outpath)
        assert load(outpath) == buf


def test_sink_parameters():
    g = Graph()
    sink = g.add_node('sink', {'format':'jpeg', 'quality':150})
    assert g.node(sink).format == 'JPG'
    assert g.node(sink).quality == 100
    with pytest.raises(ParameterError):
        g.set_parameter(sink, 'format', 'TIFF')
