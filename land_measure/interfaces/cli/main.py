"""Command-line interface for Land Measure."""

from __future__ import annotations

import argparse
import json
import logging
import sys
import threading
from pathlib import Path

from ...adapters.geolocation.replay_source import ReplayGeolocationSource
from ...application.ports.geolocation import PositionSample
from ...application.services.boundary_pipeline import BoundaryAnalyzer, PipelineState
from ...application.services.location_tracking import LocationTracker
from ...application.services.manual_measurement import MIN_POLYGON_POINTS, MeasurementSession
from ...config import (
    Backend,
    DetectorType,
    DEFAULT_CONFIDENCE_THRESHOLD,
    SUPPORTED_IMAGE_EXTENSIONS,
)
from ...core.image_ops import data_uri_to_bytes
from ...domain.entities.results import BoundaryResult
from ...domain.value_objects.config import AnalysisConfig
from ...exceptions import LandMeasureError
from ...infrastructure.plugin_registry import PluginRegistry
from ...utils.env import setup_logging

logger = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog="land-measure",
        description="Estimate land area from photos or from points picked on a map"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output"
    )
    parser.add_argument(
        "--log-file",
        help="Also write logs to this file"
    )
    
    subparsers = parser.add_subparsers(dest="command", required=True)
    
    # analyze
    analyze = subparsers.add_parser("analyze", help="Estimate a parcel's area from a photo")
    analyze.add_argument("image", type=Path, help="Input image or folder")
    analyze.add_argument(
        "-o", "--output",
        type=Path,
        help="Folder for original, detections and boundary JPEGs"
    )
    analyze.add_argument(
        "-t", "--threshold",
        type=float,
        default=DEFAULT_CONFIDENCE_THRESHOLD,
        help=f"Minimum detection confidence, exclusive (default: {DEFAULT_CONFIDENCE_THRESHOLD})"
    )
    analyze.add_argument(
        "--detector",
        default=DetectorType.SSDLITE.value,
        help="Detector plugin name (default: ssdlite)"
    )
    analyze.add_argument(
        "-d", "--device",
        choices=[b.value for b in Backend],
        default=Backend.AUTO.value,
        help="Compute device (default: auto)"
    )
    analyze.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON"
    )
    
    # measure
    measure = subparsers.add_parser("measure", help="Geodesic area of a polygon")
    measure.add_argument(
        "points",
        nargs="+",
        metavar="LON,LAT",
        help="Polygon vertices in order, at least 3"
    )
    measure.add_argument(
        "--json",
        action="store_true",
        help="Print the polygon as a GeoJSON Feature"
    )
    
    # track
    track = subparsers.add_parser("track", help="Replay recorded positions through a location watch")
    track.add_argument("samples", type=Path, help="CSV with latitude, longitude[, accuracy] columns")
    track.add_argument(
        "--interval",
        type=float,
        default=0.0,
        help="Seconds between replayed samples (default: 0)"
    )
    track.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Give up after this many seconds (default: 30)"
    )
    
    return parser


def parse_point(text: str) -> tuple[float, float]:
    """Parse 'LON,LAT' into floats."""
    try:
        lon, lat = (float(part) for part in text.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected LON,LAT but got '{text}'") from None
    return lon, lat


def save_assets(result: BoundaryResult, output: Path, stem: str) -> list[Path]:
    """Write the three rendered images as JPEG files."""
    output.mkdir(parents=True, exist_ok=True)
    written = []
    for kind in ("original", "detections", "boundary"):
        path = output / f"{stem}_{kind}.jpg"
        path.write_bytes(data_uri_to_bytes(getattr(result.visualization, kind)))
        written.append(path)
    return written


def collect_images(input_path: Path) -> list[Path]:
    """A single file, or the supported images in a folder."""
    if input_path.is_dir():
        return sorted(
            f for f in input_path.iterdir()
            if f.suffix.lower() in SUPPORTED_IMAGE_EXTENSIONS
        )
    return [input_path]


def report(result: BoundaryResult, name: str, processing_time_ms: float, as_json: bool) -> None:
    if as_json:
        payload = result.to_dict()
        payload["image"] = name
        payload["processing_time_ms"] = processing_time_ms
        print(json.dumps(payload, indent=2))
        return
    if result.used_fallback_boundary:
        logger.warning(f"{name}: no land objects detected, area covers the whole image")
    print(
        f"{name}: {result.area_hectares:.4f} ha "
        f"({result.area_square_meters:.1f} m², "
        f"{len(result.detections)} objects, "
        f"{result.pixel_to_meter_scale:.4f} m/px)"
    )


def run_analyze(parsed) -> int:
    try:
        config = AnalysisConfig(
            confidence_threshold=parsed.threshold,
            detector=parsed.detector,
            device=parsed.device
        )
        detector = PluginRegistry.create_detector(config.detector, device=config.device)
    except (LandMeasureError, ValueError) as e:
        logger.error(f"Invalid settings: {e}")
        return 1
    
    files = collect_images(parsed.image)
    if not files:
        logger.error(f"No image files found in {parsed.image}")
        return 1
    
    failed = []
    try:
        with BoundaryAnalyzer(detector, config) as analyzer:
            for i, file_path in enumerate(files, 1):
                if len(files) > 1:
                    logger.info(f"[{i}/{len(files)}] {file_path.name}")
                status = analyzer.analyze(file_path)
                
                if status.state is not PipelineState.DONE:
                    logger.error(f"{file_path.name}: {status.error_message}")
                    failed.append(file_path.name)
                    continue
                
                if parsed.output:
                    for path in save_assets(status.result, parsed.output, file_path.stem):
                        logger.info(f"Saved: {path}")
                report(status.result, file_path.name, status.processing_time_ms, parsed.json)
    except LandMeasureError as e:
        logger.error(str(e))
        return 1
    
    if failed:
        logger.warning(f"Completed: {len(files) - len(failed)}/{len(files)} succeeded")
        return 1
    return 0


def run_measure(parsed) -> int:
    try:
        points = [parse_point(p) for p in parsed.points]
    except argparse.ArgumentTypeError as e:
        logger.error(str(e))
        return 1
    
    if len(points) < MIN_POLYGON_POINTS:
        logger.error(f"A polygon needs at least {MIN_POLYGON_POINTS} points, got {len(points)}")
        return 1
    
    try:
        session = MeasurementSession(PluginRegistry.create_geodesy())
        session.start()
        for lon, lat in points:
            session.add_point(lon, lat)
        measurement = session.finish()
    except (LandMeasureError, ValueError) as e:
        logger.error(str(e))
        return 1
    
    if parsed.json:
        print(json.dumps(measurement.to_geojson(), indent=2))
    else:
        print(
            f"Area: {measurement.area_hectares:.4f} ha "
            f"({measurement.area_square_meters:.1f} m², "
            f"perimeter {measurement.perimeter_meters:.1f} m)"
        )
    return 0


def run_track(parsed) -> int:
    try:
        source = ReplayGeolocationSource.from_csv(parsed.samples, interval=parsed.interval)
    except (OSError, KeyError, ValueError) as e:
        logger.error(f"Could not read samples from {parsed.samples}: {e}")
        return 1
    
    total = source.sample_count
    if total == 0:
        logger.error("No samples to replay")
        return 1
    
    finished = threading.Event()
    received = 0
    
    def on_location(sample: PositionSample) -> None:
        nonlocal received
        received += 1
        accuracy = f"±{sample.accuracy:.0f} m" if sample.accuracy is not None else "unknown accuracy"
        print(f"{sample.latitude:.6f}, {sample.longitude:.6f} ({accuracy})")
        if received >= total:
            finished.set()
    
    with LocationTracker(source).start(on_location) as watch:
        if watch.error is None and not finished.wait(parsed.timeout):
            logger.warning(f"Timed out after {parsed.timeout}s")
        error = watch.error
    
    if error is not None:
        logger.error(str(error))
        return 1
    return 0


def main(args: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    parsed = parser.parse_args(args)
    
    setup_logging(
        logging.DEBUG if parsed.verbose else logging.INFO,
        log_file=parsed.log_file
    )
    
    commands = {
        "analyze": run_analyze,
        "measure": run_measure,
        "track": run_track,
    }
    try:
        return commands[parsed.command](parsed)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 1


if __name__ == "__main__":
    sys.exit(main())
