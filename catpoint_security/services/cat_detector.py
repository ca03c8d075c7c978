"""Cat detectors that classify camera frames."""

import os
import random
from typing import Any, List, Optional, Tuple

import cv2
import numpy as np

from .interfaces import CatDetectorInterface
from ..config.defaults import DETECTOR_SETTINGS
from ..exceptions import CatDetectorError, ConfigurationError
from ..models.config import SecurityConfig
from ..logging_config import get_logger

logger = get_logger("cat_detector")


class HaarCascadeCatDetector(CatDetectorInterface):
    """Cat detector using OpenCV Haar cascades.

    Each candidate box is scored from its size and its distance to the frame
    center; the frame shows a cat when any box scores at least the requested
    confidence.
    """

    def __init__(self, cascade_path: Optional[str] = None, min_detection_size: int = 30):
        self.cascade_path = cascade_path
        self.min_detection_size = (min_detection_size, min_detection_size)
        self.max_detection_size = DETECTOR_SETTINGS["max_detection_size"]
        self.scale_factor = DETECTOR_SETTINGS["scale_factor"]
        self.min_neighbors = DETECTOR_SETTINGS["min_neighbors"]
        self.blur_kernel_size = DETECTOR_SETTINGS["blur_kernel_size"]
        self.contrast_alpha = DETECTOR_SETTINGS["contrast_alpha"]
        self.brightness_beta = DETECTOR_SETTINGS["brightness_beta"]
        self.haar_cascade = None

    def load_model(self) -> None:
        """Load the configured cascade, falling back to OpenCV's bundled cat cascades."""
        candidates = []
        if self.cascade_path:
            candidates.append(self.cascade_path)
        candidates.extend(cv2.data.haarcascades + name
                          for name in DETECTOR_SETTINGS["cascade_files"])

        for path in candidates:
            if not os.path.exists(path):
                logger.debug(f"Cascade not found: {path}")
                continue
            cascade = cv2.CascadeClassifier(path)
            if cascade.empty():
                logger.warning(f"Failed to load cascade from {path}")
                continue
            self.haar_cascade = cascade
            logger.info(f"Loaded Haar cascade: {path}")
            return

        raise CatDetectorError(f"No usable Haar cascade found (tried {len(candidates)} paths)")

    def image_contains_cat(self, image: Any, confidence_threshold: float) -> bool:
        if image is None or getattr(image, "size", 0) == 0:
            return False

        if self.haar_cascade is None:
            self.load_model()

        processed = self._preprocess_frame(image)
        boxes = self._detect_with_haar_cascade(processed)
        scores = [self._score(box, image.shape) for box in boxes]

        best = max(scores, default=0.0)
        logger.debug(f"{len(boxes)} candidate boxes, best confidence {best:.1f}%")
        return best >= confidence_threshold

    def _preprocess_frame(self, frame: np.ndarray) -> np.ndarray:
        """Grayscale, denoise and equalize the frame for the cascade."""
        if frame.ndim == 3:
            gray = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)
        else:
            gray = frame

        gray = gray.astype(np.uint8)
        blurred = cv2.GaussianBlur(gray, (self.blur_kernel_size, self.blur_kernel_size), 0)
        enhanced = cv2.convertScaleAbs(blurred, alpha=self.contrast_alpha, beta=self.brightness_beta)
        return cv2.equalizeHist(enhanced)

    def _detect_with_haar_cascade(self, frame: np.ndarray) -> List[Tuple[int, int, int, int]]:
        detections = self.haar_cascade.detectMultiScale(
            frame,
            scaleFactor=self.scale_factor,
            minNeighbors=self.min_neighbors,
            minSize=self.min_detection_size,
            maxSize=self.max_detection_size,
            flags=cv2.CASCADE_SCALE_IMAGE
        )
        return [(int(x), int(y), int(w), int(h)) for x, y, w, h in detections]

    def _score(self, box: Tuple[int, int, int, int], frame_shape: Tuple[int, ...]) -> float:
        """Confidence in percent for a single box."""
        x, y, w, h = box
        frame_h, frame_w = frame_shape[:2]

        center_x = x + w // 2
        center_y = y + h // 2
        # A box center can be at most half a diagonal away from the frame center
        center_dist = ((center_x - frame_w // 2) ** 2 + (center_y - frame_h // 2) ** 2) ** 0.5
        max_dist = ((frame_w ** 2 + frame_h ** 2) ** 0.5) / 2
        center_factor = max(0.0, 1.0 - center_dist / max_dist) if max_dist else 0.0

        max_area = self.max_detection_size[0] * self.max_detection_size[1]
        size_factor = min(1.0, (w * h) / max_area)

        confidence = 0.4 * center_factor + 0.6 * size_factor
        return max(0.0, min(1.0, confidence)) * 100.0


class FakeCatDetector(CatDetectorInterface):
    """Detector that answers at random; for demos without a camera model."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def image_contains_cat(self, image: Any, confidence_threshold: float) -> bool:
        result = self.rng.random() * 100.0 >= confidence_threshold
        logger.debug(f"Fake detection result: {result}")
        return result


def create_cat_detector(config: SecurityConfig) -> CatDetectorInterface:
    """Build the detector selected in the configuration."""
    if config.detector == "haar":
        detector = HaarCascadeCatDetector(config.haar_cascade_path, config.min_detection_size)
        detector.load_model()
        return detector
    if config.detector == "fake":
        return FakeCatDetector()
    raise ConfigurationError(f"Unknown detector: {config.detector}")
