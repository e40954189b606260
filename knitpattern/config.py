import os
from pathlib import Path

# Base paths
PROJECT_ROOT = Path(__file__).parent.parent
DATA_DIR = PROJECT_ROOT / "data"
INPUTS_DIR = DATA_DIR / "inputs"
OUTPUTS_DIR = DATA_DIR / "outputs"

# Ensure directories exist (wrapped for Modal compatibility)
try:
    INPUTS_DIR.mkdir(parents=True, exist_ok=True)
    OUTPUTS_DIR.mkdir(parents=True, exist_ok=True)
except OSError:
    pass  # Running in read-only environment (e.g., Modal)

# Pattern defaults
DEFAULT_WIDTH_STITCHES = 60
DEFAULT_COLOR_COUNT = 8
MIN_WIDTH_STITCHES = 10
MAX_WIDTH_STITCHES = 400
MAX_ROW_STITCHES = 1000

# Quantization defaults
DEFAULT_MAX_ITER = 15
MAX_SAMPLE_PIXELS = 10000
ALPHA_THRESHOLD = 128
MAX_DUPLICATE_RETRIES = 32

# Rendering defaults
MIN_CELL_SIZE = 5
MAX_CELL_SIZE = 20
TARGET_RENDER_WIDTH = 800
GRID_MAJOR_EVERY = 10

# API settings
MAX_UPLOAD_BYTES = 20 * 1024 * 1024
_random_seed = os.getenv("KNITPATTERN_RANDOM_SEED")
RANDOM_SEED = int(_random_seed) if _random_seed else None
