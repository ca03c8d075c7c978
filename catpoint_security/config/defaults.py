"""Default configuration values and constants."""

# Confidence (percent) a frame must reach before it counts as showing a cat
CAT_CONFIDENCE_THRESHOLD = 50.0

# System constants
SYSTEM_CONSTANTS = {
    "LOG_ROTATION_SIZE_MB": 10,
    "LOG_BACKUP_COUNT": 5,
    "MAX_UPLOAD_SIZE_MB": 16
}

# File paths and directories
DEFAULT_PATHS = {
    "config_file": "config.json",
    "storage_dir": "data",
    "logs_dir": "logs"
}

# Haar cascade settings for the OpenCV cat detector
DETECTOR_SETTINGS = {
    "cascade_files": (
        "haarcascade_frontalcatface.xml",
        "haarcascade_frontalcatface_extended.xml"
    ),
    "scale_factor": 1.1,
    "min_neighbors": 3,
    "max_detection_size": (300, 300),
    "blur_kernel_size": 3,
    "contrast_alpha": 1.2,
    "brightness_beta": 10
}

VALID_REPOSITORIES = ("memory", "sqlite")
VALID_DETECTORS = ("haar", "fake")
