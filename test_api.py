"""
Tests for the pattern HTTP API.

Usage:
    pytest test_api.py
"""

import base64
from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from knitpattern.api.server import app, process_image


@pytest.fixture
def client():
    return TestClient(app)


def png_bytes(size=(40, 30)):
    im = Image.new("RGB", size, (240, 240, 240))
    for x in range(10, 30):
        for y in range(8, 22):
            im.putpixel((x, y), (200, 40, 40))
    buf = BytesIO()
    im.save(buf, format="PNG")
    return buf.getvalue()


def post_pattern(client, data=None, content_type="image/png", content=None):
    files = {"image": ("input.png", content if content is not None else png_bytes(), content_type)}
    return client.post("/generate-pattern", files=files, data=data or {})


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["message"] == "Knit Pattern API"


def test_generate_pattern(client):
    response = post_pattern(client, data={
        "width_stitches": "12",
        "color_count": "3",
        "seed_colors": "#FF0000",
        "random_seed": "3",
    })

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert (body["width"], body["height"]) == (12, 9)
    assert body["palette"][0] == "#FF0000"
    assert len(body["palette"]) <= 3
    assert sum(entry["stitches"] for entry in body["legend"]) == 12 * 9
    assert set(body["files"]) == {"png", "pdf", "svg"}
    assert base64.b64decode(body["files"]["png"]).startswith(b"\x89PNG")
    assert base64.b64decode(body["files"]["pdf"]).startswith(b"%PDF-")


def test_generate_pattern_is_reproducible_with_seed(client):
    data = {"width_stitches": "10", "color_count": "4", "random_seed": "7"}

    first = post_pattern(client, data=data).json()
    second = post_pattern(client, data=data).json()

    assert first["palette"] == second["palette"]


def test_rejects_non_image_upload(client):
    response = post_pattern(client, content_type="text/plain", content=b"hello")
    assert response.status_code == 400


def test_rejects_unreadable_image(client):
    response = post_pattern(client, content=b"not really a png")
    assert response.status_code == 400


def test_rejects_malformed_seed_color(client):
    response = post_pattern(client, data={"seed_colors": "#12345"})
    assert response.status_code == 400
    assert "Invalid hex color" in response.json()["detail"]


def test_rejects_narrow_pattern(client):
    response = post_pattern(client, data={"width_stitches": "5"})
    assert response.status_code == 400


def test_process_image_accepts_seed_list():
    result = process_image(png_bytes(), {
        "width_stitches": 10,
        "color_count": 2,
        "seed_colors": ["#00FF00"],
        "show_grid": False,
        "random_seed": 1,
    })

    assert result["palette"][0] == "#00FF00"
    assert result["legend"][0]["locked"] is True


@pytest.mark.parametrize("color_count", ["0", "-3"])
def test_rejects_non_positive_color_count(client, color_count):
    response = post_pattern(client, data={"width_stitches": "10", "color_count": color_count})
    assert response.status_code == 400
    assert "color_count" in response.json()["detail"]


def test_rejects_oversized_pattern_width(client):
    response = post_pattern(client, data={"width_stitches": "1000000"})
    assert response.status_code == 400
    assert "at most" in response.json()["detail"]


def test_process_image_coerces_string_options():
    from_strings = process_image(png_bytes(), {
        "width_stitches": "10",
        "color_count": "3",
        "random_seed": "7",
        "show_grid": "false",
    })
    from_values = process_image(png_bytes(), {
        "width_stitches": 10,
        "color_count": 3,
        "random_seed": 7,
        "show_grid": False,
    })

    assert from_strings["palette"] == from_values["palette"]
    assert from_strings["files"]["png"] == from_values["files"]["png"]


@pytest.mark.parametrize("options", [
    {"random_seed": "seven"},
    {"show_grid": "maybe"},
    {"color_count": "many"},
])
def test_process_image_rejects_malformed_options(options):
    with pytest.raises(ValueError):
        process_image(png_bytes(), {"width_stitches": 10, **options})
