"""
conftest.py

Test configuration for bingsy tests.

Defines Pytest fixtures for supplying test data to tests across the entire
test suite. Fixtures used within only a single module are defined
directly in that module. Conftest.py should only be used for universal
fixtures to avoid unnecessary performance hit.
"""

from pathlib import Path

import pytest
from PIL import Image

from bingsy.cli_utils.console import console


SAMPLE_XML = b"""<?xml version="1.0" encoding="utf-8" ?>
<images>
    <image>
        <startdate>20240101</startdate>
        <fullstartdate>202401010800</fullstartdate>
        <enddate>20240102</enddate>
        <url>/az/hprichbg/rb/Sample_EN-US1234567890_1366x768.jpg</url>
        <urlBase>/az/hprichbg/rb/Sample_EN-US1234567890</urlBase>
        <copyright>Sample bay at dawn (c) Some Photographer</copyright>
        <copyrightlink>http://www.bing.com/search?q=sample</copyrightlink>
    </image>
    <tooltips>
        <loadMessage><message>Loading...</message></loadMessage>
    </tooltips>
</images>
"""


@pytest.fixture
def sample_xml() -> bytes:
    """
    A trimmed down HPImageArchive response with a single image.
    """

    return SAMPLE_XML


@pytest.fixture
def test_image(tmp_path) -> Path:
    """
    Returns a Path to a small, valid jpeg written with Pillow.
    """

    img_path = tmp_path / "test_data" / "sample.jpg"
    img_path.parent.mkdir()
    Image.new("RGB", (64, 36), color=(20, 40, 120)).save(img_path, format="JPEG")

    return img_path


@pytest.fixture(autouse=True)
def restore_console():
    """
    --quiet swaps the file of the shared console for a throwaway buffer. Reset it after every
    test so the console writes to whatever sys.stdout is again.
    """

    yield
    console.file = None


@pytest.fixture(autouse=True)
def config_dir(tmp_path, monkeypatch) -> Path:
    """
    Point BINGSY_CONFIG_DIR to a temporary directory so tests never read or write the
    real ~/.config/bingsy.
    """

    path = tmp_path / "config"
    monkeypatch.setenv("BINGSY_CONFIG_DIR", str(path))

    return path
