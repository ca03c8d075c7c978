"""Utility functions for the security system."""

import os
from datetime import datetime
from typing import Optional

import cv2
import numpy as np


def ensure_directory_exists(path: str) -> None:
    """Ensure a directory exists, create if it doesn't."""
    if not os.path.exists(path):
        os.makedirs(path, exist_ok=True)


def decode_image(data: bytes) -> Optional[np.ndarray]:
    """Decode an encoded image (JPEG, PNG, ...) into a BGR array, or None if unreadable."""
    if not data:
        return None
    buffer = np.frombuffer(data, dtype=np.uint8)
    return cv2.imdecode(buffer, cv2.IMREAD_COLOR)


def format_timestamp(dt: datetime) -> str:
    """Format datetime for consistent display."""
    return dt.strftime("%Y-%m-%d %H:%M:%S")
