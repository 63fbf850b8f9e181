"""Tests for screenshot encoding and the picture file store."""

import os

from browser_tabs.rendering import PictureStore, decode_image, encode_image

from conftest import make_image


class TestCodec:
    def test_png_encoding(self):
        raw = encode_image(make_image(10, 6))
        assert raw[:8] == b"\x89PNG\r\n\x1a\n"
        image = decode_image(raw)
        assert (image.width(), image.height()) == (10, 6)

    def test_decode_empty(self):
        assert decode_image(b"") is None


class TestPictureStore:
    def test_path_for(self, tmp_path):
        store = PictureStore(str(tmp_path))
        assert store.path_for(42) == os.path.join(str(tmp_path), "42_pic.save")

    def test_save_creates_directory(self, tmp_path):
        store = PictureStore(str(tmp_path / "nested" / "dir"))
        path = store.path_for(1)
        assert store.save(make_image(), path) is True
        assert os.path.exists(path)
        assert store.load(path).width() == 8

    def test_load_missing(self, tmp_path):
        store = PictureStore(str(tmp_path))
        assert store.load(store.path_for(1)) is None

    def test_delete(self, tmp_path):
        store = PictureStore(str(tmp_path))
        path = store.path_for(1)
        store.save(make_image(), path)
        assert store.delete(path) is True
        assert store.delete(path) is False

    def test_save_into_unwritable_location(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        store = PictureStore(str(blocker))
        assert store.save(make_image(), store.path_for(1)) is False

    def test_take_loads_and_removes(self, tmp_path):
        store = PictureStore(str(tmp_path))
        path = store.path_for(1)
        store.save(make_image(), path)
        assert store.take(path).width() == 8
        assert not os.path.exists(path)
        assert store.take(path) is None
