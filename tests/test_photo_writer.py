import logging

import pytest
from PIL import Image

from photo_collage.managers.photo_writer import (
    FileSystemPhotoWriter,
    PersistenceError,
    writer_metrics,
)


@pytest.fixture(autouse=True)
def reset_metrics():
    writer_metrics.reset()
    yield
    writer_metrics.reset()


def test_write_creates_png_named_after_id(tmp_path):
    writer = FileSystemPhotoWriter(tmp_path / "saved")
    image = Image.new("RGB", (8, 4), "red")

    photo_id = writer.write(image)

    path = writer.path_for(photo_id)
    assert path is not None
    assert path.name == f"{photo_id}.png"
    with Image.open(path) as stored:
        assert stored.size == (8, 4)
    assert writer_metrics.counters["success"] == 1


def test_write_jpeg_converts_alpha(tmp_path):
    writer = FileSystemPhotoWriter(tmp_path, image_format="jpg")
    photo_id = writer.write(Image.new("RGBA", (4, 4), (0, 0, 255, 128)))
    assert writer.path_for(photo_id).suffix == ".jpg"


def test_unsupported_format_rejected(tmp_path):
    with pytest.raises(ValueError):
        FileSystemPhotoWriter(tmp_path, image_format="tiff")


def test_write_failure_raises_and_logs(tmp_path, caplog):
    blocked = tmp_path / "not_a_dir"
    blocked.write_text("file in the way")
    writer = FileSystemPhotoWriter(blocked)

    caplog.set_level(logging.ERROR)
    with pytest.raises(PersistenceError):
        writer.write(Image.new("RGB", (2, 2)))

    assert writer_metrics.counters["failure"] == 1
    assert any(
        record.message == "photo write failed" and "cid" in record.__dict__
        for record in caplog.records
    )


def test_ids_are_unique(tmp_path):
    writer = FileSystemPhotoWriter(tmp_path)
    image = Image.new("RGB", (2, 2))
    assert writer.write(image) != writer.write(image)
