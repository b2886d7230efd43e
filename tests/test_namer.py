import re

from media_ingest.services import namer
from media_ingest.services.namer import file_extension, generate_key, thumbnail_name

KEY_RE = re.compile(r"^(\d+)_(\d{1,3})\.(.*)$")


def test_key_format_and_lowercased_extension():
    match = KEY_RE.match(generate_key("Beach.JPG"))
    assert match
    assert 0 <= int(match.group(2)) <= 999
    assert match.group(3) == "jpg"


def test_key_is_timestamp_and_draw(monkeypatch):
    monkeypatch.setattr(namer.time, "time", lambda: 1700000000.0)
    monkeypatch.setattr(namer.random, "randint", lambda a, b: 7)
    assert generate_key("clip.MOV") == "1700000000000_7.mov"


def test_keys_differ_when_draws_differ(monkeypatch):
    monkeypatch.setattr(namer.time, "time", lambda: 1700000000.0)
    draws = iter([1, 2])
    monkeypatch.setattr(namer.random, "randint", lambda a, b: next(draws))
    assert generate_key("a.png") != generate_key("a.png")


def test_extension_is_text_after_last_dot():
    assert file_extension("archive.tar.GZ") == "gz"
    assert file_extension("README") == ""
    assert generate_key("README").endswith(".")


def test_thumbnail_name_is_jpeg():
    assert thumbnail_name("beach.PNG") == "thumb_beach.jpg"
    assert thumbnail_name("scan") == "thumb_scan.jpg"
    assert file_extension(thumbnail_name("a.heic")) == "jpg"
