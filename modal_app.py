"""
Modal deployment for the Knit Pattern API.

Deploy with: modal deploy modal_app.py
Local dev:   modal serve modal_app.py
"""

import modal

app = modal.App("knit-pattern")

# Define the container image with all dependencies
image = (
    modal.Image.debian_slim(python_version="3.11")
    # Python dependencies
    .pip_install(
        # Core image processing
        "pillow",
        "numpy",
        # Web API
        "fastapi",
        "uvicorn[standard]",
        "python-multipart",
    )
    # Add local source code LAST (Modal adds these at container startup for faster rebuilds)
    .add_local_dir("knitpattern", remote_path="/root/knitpattern")
)


@app.cls(
    image=image,
    timeout=300,
    scaledown_window=300,  # Keep container warm for 5 min after last request
)
class PatternProcessor:
    """
    Pattern generation service. Quantization is CPU-only, so no GPU is requested.
    """

    @modal.method()
    def process(self, image_data: bytes, options: dict = None) -> dict:
        """
        Generate a pattern. Private method callable only via Modal SDK.

        Args:
            image_data: Raw image bytes
            options: Processing options dict (see process_image)

        Returns:
            dict with the palette, legend and base64-encoded files
        """
        import sys
        sys.path.insert(0, "/root")

        print(f"options: {str(options)}")

        from knitpattern.api.server import process_image
        return process_image(image_data, options or {})


@app.function(image=image)
@modal.asgi_app()
def web():
    """Serve the FastAPI app over HTTP."""
    import sys
    sys.path.insert(0, "/root")

    from knitpattern.api.server import app as fastapi_app
    return fastapi_app
