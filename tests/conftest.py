import asyncio
import base64
import io
import os
import sys

import pytest
from PIL import Image

# Keep test runs from writing a server.log into the repo
os.environ.setdefault("LOG_FILE", "")

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))


def run(coro):
    """Drive a coroutine to completion from a sync test."""
    return asyncio.run(coro)


def make_png_b64(size=(64, 48), color=(200, 30, 90)) -> str:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return base64.b64encode(buffer.getvalue()).decode("ascii")


@pytest.fixture
def png_b64():
    return make_png_b64()
