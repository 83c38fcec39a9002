"""Pytest configuration for psd2png tests."""

from typing import Any

import pytest

from tests.psd2png.utils import make_raster, make_rgb_psd, write_file


def pytest_configure(config: Any) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "parallel: mark test as running the batch with several workers"
    )


@pytest.fixture
def input_dir(tmp_path):
    """Input root with a valid document, a corrupt one and a flat raster."""
    root = tmp_path / "in"
    write_file(str(root / "a.psd"), make_rgb_psd(100, 50))
    write_file(str(root / "b.psd"), b"not an image at all")
    write_file(str(root / "c.psd"), make_raster(20, 20, format="JPEG"))
    return root


@pytest.fixture
def output_dir(tmp_path):
    return tmp_path / "out"
