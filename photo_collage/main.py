# main.py
"""
Entry point for Photo Collage: builds a collage from a directory of photos.

The command arms one selection session, selects the requested assets (or the
first ones in the directory), waits for the preview, saves it and prints the
saved photo id.
"""
import argparse
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional, Sequence

from PySide6.QtCore import QCoreApplication, QThreadPool

from . import config
from .assets import DirectoryAssetLibrary
from .controllers import CollageSessionController
from .managers import Failed, FileSystemPhotoWriter, Saved


def configure_logging(log_path: Optional[Path] = None) -> logging.Logger:
    """Configure and return the application logger.

    The handler setup is idempotent to avoid duplicate handlers when the module
    is imported multiple times (e.g., in tests). A rotating file handler limits
    on-disk log growth while mirroring output to stdout for developer visibility.
    """

    logger = logging.getLogger(config.LOGGER_NAME)
    if logger.handlers:
        return logger

    level_name = os.environ.get(config.LOG_LEVEL_ENV, "INFO").upper()
    logger.setLevel(getattr(logging, level_name, logging.INFO))

    formatter = logging.Formatter(
        "%(asctime)s - %(levelname)s - %(name)s - %(message)s"
    )

    if log_path is None:
        log_path = Path.cwd() / config.LOG_FILE_NAME
    log_path.parent.mkdir(parents=True, exist_ok=True)

    file_handler = RotatingFileHandler(
        log_path,
        maxBytes=config.LOG_MAX_BYTES,
        backupCount=config.LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setFormatter(formatter)

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)

    logger.addHandler(file_handler)
    logger.addHandler(stream_handler)
    logger.propagate = False

    return logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="photo-collage",
        description="Build a strip collage from photos in a directory and save it.",
    )
    parser.add_argument("source", type=Path, help="directory holding the photos")
    parser.add_argument(
        "-s", "--select", dest="asset_ids", action="append", default=[],
        metavar="ID", help="asset (file name) to select; repeatable",
    )
    parser.add_argument(
        "-o", "--output", type=Path, default=Path(config.SAVED_PHOTOS_PATH),
        help="directory the collage is saved to",
    )
    parser.add_argument(
        "--format", choices=[fmt.lower() for fmt in config.SAVE_FORMATS],
        default=config.SAVE_FORMAT.lower(), help="image format of the saved collage",
    )
    parser.add_argument("--log-file", type=Path, default=None, help="rotating log file path")
    parser.add_argument("--timeout", type=float, default=60.0, help="seconds to wait for background work")
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug output")
    return parser


def run(args: argparse.Namespace) -> int:
    logger = configure_logging(args.log_file)
    if args.verbose:
        logger.setLevel(logging.DEBUG)

    app = QCoreApplication.instance() or QCoreApplication([sys.argv[0]])
    pool = QThreadPool.globalInstance()
    pool.setMaxThreadCount(config.MAX_WORKER_THREADS)

    try:
        library = DirectoryAssetLibrary(args.source)
        writer = FileSystemPhotoWriter(args.output, image_format=args.format)
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    controller = CollageSessionController(library, writer, thread_pool=pool)
    asset_ids: List[str] = list(args.asset_ids)
    if not asset_ids:
        asset_ids = [record.asset_id for record in controller.load_photos()[: config.MAX_ITEMS]]
    if not asset_ids:
        print(f"error: no photos found in {library.root}", file=sys.stderr)
        return 1

    try:
        controller.add()
        # One at a time so the strip follows the order given on the command line
        for asset_id in asset_ids:
            controller.select_image(asset_id)
            controller.assets.wait_for_idle(args.timeout)
        logger.info("Selected %d of %d requested photo(s)", controller.current_count, len(asset_ids))

        if not controller.save():
            print("error: none of the selected photos could be loaded", file=sys.stderr)
            return 1
        controller.orchestrator.wait_for_idle(args.timeout)
    except TimeoutError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    finally:
        controller.shutdown(wait=False)
        app.processEvents()

    result = controller.last_save_result
    if isinstance(result, Saved):
        print(result.id)
        return 0
    if isinstance(result, Failed):
        print(f"error: {result.message}", file=sys.stderr)
    return 1


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
