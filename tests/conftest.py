"""Shared pytest fixtures."""

from pathlib import Path

import pytest


def write_image(path: Path, size: tuple[int, int] = (4, 3), fmt: str = "PNG") -> Path:
    """Write a small solid-colour image to ``path`` regardless of its suffix."""
    from PIL import Image

    img = Image.new("RGB", size, color="red")
    img.save(path, fmt)
    return path


@pytest.fixture
def temp_config(tmp_path: Path) -> Path:
    """Create a temporary config file and return its path."""
    config_path = tmp_path / "numbered-print.yaml"
    config_content = '''image_folder: "pages/"
image_extensions: [".png", jpg, png]
max_consecutive_misses: 3
max_index: 50
output_html: "out/pages.html"
print_settings:
  landscape: true
  margin: minimum
ui:
  show_image_info: false
theme:
  primary_color: "#112233"
'''
    config_path.write_text(config_content, encoding="utf-8")
    return config_path


@pytest.fixture
def numbered_dir(tmp_path: Path) -> Path:
    """Create a folder with 1.png, 2.jpg and 3.png (no gap)."""
    folder = tmp_path / "images"
    folder.mkdir()
    write_image(folder / "1.png")
    write_image(folder / "2.jpg", size=(6, 8), fmt="JPEG")
    write_image(folder / "3.png")
    return folder
