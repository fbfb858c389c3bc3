"""
Privacy Filter CLI - Command Line Interface for Live Face Anonymization

Usage:
    privacyfilter webcam --mode 2
    privacyfilter webcam --camera 1 --detector mediapipe
    privacyfilter detect photo.jpg --show --mode 3
    privacyfilter modes
"""

import argparse
import logging
import sys

import cv2

from . import __version__, config
from .detectors import DETECTOR_KINDS, load_detector
from .errors import CaptureOpenError, DetectorLoadError
from .modes import Mode
from .pipeline import mirror, to_gray
from .transforms import apply_transform
from .video import run_webcam

EXIT_OK = 0
EXIT_ERROR = 1
# argparse uses 2 for usage errors
EXIT_DETECTOR_FAILED = 3
EXIT_CAPTURE_FAILED = 4


def _add_detector_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--detector", "-d",
        choices=DETECTOR_KINDS,
        default="haar",
        help="Face detector backend (default: haar)"
    )
    parser.add_argument(
        "--cascade",
        default=None,
        help="Path to a Haar cascade XML file (default: OpenCV's frontal face cascade)"
    )
    parser.add_argument(
        "--min-neighbors",
        type=int,
        default=config.DETECT_MIN_NEIGHBORS,
        help=f"Haar cascade minNeighbors (default: {config.DETECT_MIN_NEIGHBORS})"
    )
    parser.add_argument(
        "--confidence", "-c",
        type=float,
        default=config.MIN_DETECTION_CONFIDENCE,
        help="MediaPipe detection confidence threshold 0.0-1.0 (default: 0.5)"
    )
    parser.add_argument(
        "--model-path",
        default=None,
        help="Path to a MediaPipe .tflite face detector model"
    )


def _add_transform_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--mode", "-m",
        type=int,
        choices=[int(m) for m in Mode],
        default=int(Mode.NONE),
        help="Initial privacy mode: 0=none, 1=outline, 2=blur, 3=pixelate, 4=black box"
    )
    parser.add_argument(
        "--blur", "-b",
        type=int,
        default=config.BLUR_KERNEL_SIZE,
        help=f"Blur kernel size (odd number, default: {config.BLUR_KERNEL_SIZE})"
    )
    parser.add_argument(
        "--block-size",
        type=int,
        default=config.PIXEL_BLOCK_SIZE,
        help=f"Pixelation block size in pixels (default: {config.PIXEL_BLOCK_SIZE})"
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="privacyfilter",
        description="Live face privacy filter - outline, blur, pixelate or black out faces",
        epilog="Press 'q' in the video window to quit."
    )

    parser.add_argument(
        "--version", "-V",
        action="version",
        version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="count",
        default=0,
        help="Increase log output (-v for info, -vv for debug)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # ==================== WEBCAM SUBCOMMAND ====================
    webcam_parser = subparsers.add_parser(
        "webcam",
        help="Run the live privacy filter on a camera"
    )
    webcam_parser.add_argument(
        "--camera", "-i",
        default=str(config.CAMERA_ID),
        help="Camera device ID or video source (default: 0)"
    )
    webcam_parser.add_argument(
        "--wait",
        type=int,
        default=config.WAIT_MS,
        help=f"Key poll timeout per frame in ms (default: {config.WAIT_MS})"
    )
    _add_detector_arguments(webcam_parser)
    _add_transform_arguments(webcam_parser)

    # ==================== DETECT SUBCOMMAND ====================
    detect_parser = subparsers.add_parser(
        "detect",
        help="Detect faces in a still image and print their boxes"
    )
    detect_parser.add_argument(
        "input",
        help="Path to input image"
    )
    detect_parser.add_argument(
        "--mirror",
        action="store_true",
        help="Mirror the image first, as the live filter does"
    )
    detect_parser.add_argument(
        "--show", "-s",
        action="store_true",
        help="Display the filtered image in a window"
    )
    _add_detector_arguments(detect_parser)
    _add_transform_arguments(detect_parser)

    # ==================== MODES SUBCOMMAND ====================
    subparsers.add_parser(
        "modes",
        help="List the privacy modes"
    )

    return parser


def _detector_options(args) -> dict:
    if args.detector == "haar":
        return {
            "cascade_path": args.cascade,
            "min_neighbors": args.min_neighbors,
        }
    return {
        "min_detection_confidence": args.confidence,
        "model_path": args.model_path,
    }


def _camera_source(value: str):
    """Camera IDs are integers; anything else is a file or stream URL."""
    try:
        return int(value)
    except ValueError:
        return value


def cmd_webcam(args) -> int:
    """Handle the webcam subcommand."""
    print("Starting live face privacy filter...")
    print("Use the Mode trackbar to switch filters. Press 'q' to quit")

    try:
        frames = run_webcam(
            camera_id=_camera_source(args.camera),
            detector=args.detector,
            initial_mode=args.mode,
            wait_ms=args.wait,
            detector_options=_detector_options(args),
            kernel_size=args.blur,
            block_size=args.block_size
        )
    except DetectorLoadError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_DETECTOR_FAILED
    except CaptureOpenError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CAPTURE_FAILED
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        return EXIT_OK

    print(f"Done! Processed {frames} frames")
    return EXIT_OK


def cmd_detect(args) -> int:
    """Handle the detect subcommand."""
    image = cv2.imread(args.input)
    if image is None:
        print(f"Error: Could not load image: {args.input}", file=sys.stderr)
        return EXIT_ERROR

    try:
        detector = load_detector(args.detector, **_detector_options(args))
    except DetectorLoadError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_DETECTOR_FAILED

    with detector:
        if args.mirror:
            image = mirror(image)
        regions = detector.detect(to_gray(image))

    print(f"Found {len(regions)} face(s) in {args.input}")
    for region in regions:
        print(f"  x={region.x} y={region.y} width={region.width} height={region.height}")

    if args.show:
        mode = Mode(args.mode)
        for region in regions:
            apply_transform(image, region, mode, kernel_size=args.blur, block_size=args.block_size)
        cv2.imshow(f"{config.WINDOW_NAME} - Press any key to close", image)
        cv2.waitKey(0)
        cv2.destroyAllWindows()

    return EXIT_OK


def cmd_modes(args) -> int:
    """Handle the modes subcommand."""
    for mode in Mode:
        print(f"{int(mode)}  {mode.name.lower()}")
    return EXIT_OK


def main(argv=None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(asctime)s %(name)s %(levelname)s: %(message)s")

    if args.command is None:
        parser.print_help()
        return EXIT_OK

    if args.command == "webcam":
        return cmd_webcam(args)
    elif args.command == "detect":
        return cmd_detect(args)
    elif args.command == "modes":
        return cmd_modes(args)
    else:
        parser.print_help()
        return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
