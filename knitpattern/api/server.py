import base64
import os
import tempfile
from io import BytesIO
from typing import Optional

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from PIL import Image, UnidentifiedImageError

from knitpattern.config import (
    DEFAULT_COLOR_COUNT,
    DEFAULT_MAX_ITER,
    DEFAULT_WIDTH_STITCHES,
    MAX_UPLOAD_BYTES,
    RANDOM_SEED,
)
from knitpattern.processors.color import parse_seed_colors
from knitpattern.processors.pattern import legend_entries
from knitpattern.processors.pipeline import run_pattern_pipeline

app = FastAPI(title="Knit Pattern API")

TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_bool(value, name: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    text = str(value).strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean for {name}: {value!r}")


def _parse_int(value, name: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"Invalid integer for {name}: {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid integer for {name}: {value!r}") from e


def process_image(image_data: bytes, options: dict) -> dict:
    """
    Generate a pattern from raw image bytes. Called by the endpoint and by Modal.

    Args:
        image_data: Raw image bytes (PNG or JPEG)
        options: Dict with optional keys:
            - width_stitches: int - Stitches across (default 60)
            - color_count: int - Maximum palette size (default 8)
            - seed_colors: str or list[str] - Hex colors to keep unchanged
            - show_grid: bool - Draw the counting grid (default True)
            - max_iter: int - Maximum refinement passes (default 15)
            - random_seed: int - Seed for reproducible palettes

    Returns:
        dict with:
            - success: bool
            - width, height: pattern size in stitches
            - palette: list of hex colors
            - legend: list of legend entries
            - files: dict with base64-encoded png, pdf and svg

    Raises:
        ValueError: If the image cannot be read or an option is invalid
    """
    seed_colors = parse_seed_colors(options.get("seed_colors") or [])
    width_stitches = _parse_int(options.get("width_stitches", DEFAULT_WIDTH_STITCHES), "width_stitches")
    color_count = _parse_int(options.get("color_count", DEFAULT_COLOR_COUNT), "color_count")
    max_iter = _parse_int(options.get("max_iter", DEFAULT_MAX_ITER), "max_iter")
    show_grid = _parse_bool(options.get("show_grid", True), "show_grid")

    random_seed = options.get("random_seed")
    if random_seed is None:
        random_seed = RANDOM_SEED
    else:
        random_seed = _parse_int(random_seed, "random_seed")

    if color_count < 1:
        raise ValueError(f"color_count must be at least 1, got {color_count}")

    try:
        image = Image.open(BytesIO(image_data))
        image.load()
    except UnidentifiedImageError as e:
        raise ValueError(f"Cannot read image: {e}") from e

    print(f"Generating pattern with options: {options}")

    with tempfile.TemporaryDirectory() as temp_dir:
        outputs = run_pattern_pipeline(
            image,
            temp_dir,
            width_stitches=width_stitches,
            n_colors=color_count,
            seed_colors=seed_colors,
            max_iter=max_iter,
            show_grid=show_grid,
            rng=random_seed,
        )
        pattern = outputs.pop("pattern")

        # Prepare response with base64-encoded files
        files = {}
        for name, path in outputs.items():
            if os.path.exists(path):
                with open(path, "rb") as f:
                    files[name] = base64.b64encode(f.read()).decode()

    legend = legend_entries(pattern)
    return {
        "success": True,
        "message": "Pattern generated successfully",
        "width": pattern.width,
        "height": pattern.height,
        "palette": [entry["hex"] for entry in legend],
        "legend": legend,
        "iterations": pattern.iterations,
        "converged": pattern.converged,
        "files": files,
    }


@app.post("/generate-pattern")
async def generate_pattern_endpoint(
    image: UploadFile = File(..., description="PNG or JPEG image"),
    width_stitches: int = Form(DEFAULT_WIDTH_STITCHES, description="Stitches across"),
    color_count: int = Form(DEFAULT_COLOR_COUNT, description="Maximum number of colors"),
    seed_colors: str = Form("", description="Comma-separated hex colors to keep"),
    show_grid: bool = Form(True, description="Draw the counting grid"),
    max_iter: int = Form(DEFAULT_MAX_ITER, description="Maximum refinement passes"),
    random_seed: Optional[int] = Form(None, description="Seed for reproducible palettes"),
):
    """
    Turn an image into a knitting pattern.

    - **image**: PNG or JPEG file
    - **width_stitches**: number of stitches across (rows follow the aspect ratio)
    - **color_count**: maximum palette size
    - **seed_colors**: hex colors that must appear unchanged in the palette
    """
    if not image.content_type or not image.content_type.startswith("image/"):
        raise HTTPException(
            status_code=400,
            detail="File must be an image"
        )

    content = await image.read()
    if len(content) > MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=413,
            detail=f"Image exceeds {MAX_UPLOAD_BYTES} bytes"
        )

    options = {
        "width_stitches": width_stitches,
        "color_count": color_count,
        "seed_colors": seed_colors,
        "show_grid": show_grid,
        "max_iter": max_iter,
        "random_seed": random_seed,
    }

    try:
        result = await run_in_threadpool(process_image, content, options)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Unexpected error: {str(e)}"
        )

    return JSONResponse(status_code=200, content=result)


@app.get("/")
async def root():
    return {"message": "Knit Pattern API", "version": "1.0.0"}


@app.get("/health")
async def health():
    return {"status": "healthy"}
