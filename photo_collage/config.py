# config.py
"""
Application configuration constants for Photo Collage
"""

# Working set
MAX_ITEMS = 6

# Collage canvas (width, height)
COLLAGE_SIZE = (1080, 200)

# Asset retrieval sizes (width, height)
THUMBNAIL_SIZE = (200, 200)
FULL_IMAGE_SIZE = (2000, 2000)   # Matches the display optimization ceiling
DEGRADED_PREVIEW_SIZE = (64, 64)  # Placeholder delivered before the full image

# Supported image formats
SUPPORTED_IMAGE_FORMATS = ['png', 'jpg', 'jpeg', 'bmp', 'webp', 'gif', 'tiff']

# Background work
MAX_WORKER_THREADS = 4
WAIT_POLL_SECONDS = 0.01

# Save options
SAVE_FORMAT = "PNG"
SAVE_FORMATS = ["PNG", "JPEG"]
QUALITY_DEFAULT = 95
SAVED_PHOTOS_PATH = "saved_collages"

# Logging
LOGGER_NAME = "photo_collage"
LOG_FILE_NAME = "photo_collage.log"
LOG_MAX_BYTES = 1_048_576
LOG_BACKUP_COUNT = 5
LOG_LEVEL_ENV = "PHOTO_COLLAGE_LOG_LEVEL"
