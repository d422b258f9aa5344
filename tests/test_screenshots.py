import re

from scraper.screenshots import ScreenshotPathFactory


def test_creates_directory_and_names_by_millis(tmp_path):
    factory = ScreenshotPathFactory(tmp_path / "screenshots", clock=lambda: 1700000000.123)

    path = factory.reserve()

    assert path.parent == tmp_path / "screenshots"
    assert path.name == "screenshot-1700000000123.png"
    assert path.exists()


def test_same_millisecond_does_not_collide(tmp_path):
    factory = ScreenshotPathFactory(tmp_path, clock=lambda: 1700000000.0)

    paths = [factory.reserve() for _ in range(5)]

    assert len(set(paths)) == 5
    for path in paths:
        assert re.fullmatch(r"screenshot-\d+\.png", path.name)


def test_separate_factories_sharing_a_directory_do_not_collide(tmp_path):
    first = ScreenshotPathFactory(tmp_path, clock=lambda: 1700000000.0)
    second = ScreenshotPathFactory(tmp_path, clock=lambda: 1700000000.0)

    assert first.reserve() != second.reserve()


def test_relative_directory_follows_working_directory(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    factory = ScreenshotPathFactory("screenshots", clock=lambda: 1.0)

    path = factory.reserve()

    assert path == tmp_path / "screenshots" / "screenshot-1000.png"
