"""
Command-line interface for parcel edge classification

Usage:
    parcel-edges analyze --parcels parcels.geojson --roads roads.geojson --parcel-id 123 --output analysis.json
    parcel-edges viewport --parcels parcels.geojson --bbox -123.12 49.26 -123.10 49.27 --zoom 15
"""

import json
import sys
import argparse

from loguru import logger

from .classification import ParcelEdgeClassifier
from .config import get_config, validate_config
from .geojson import edge_feature_collection, load_parcels, parcel_to_feature
from .roads import GeoJSONLineProvider
from .viewport import Bounds, build_viewport_index, query_parcels_in_bounds, render_parcels


def setup_logging(verbose: bool = False):
    """Configure logging"""
    logger.remove()
    level = "DEBUG" if verbose else "INFO"
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{message}</cyan>",
        level=level
    )


def _write_json(data, path):
    if path:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
            f.write("\n")
    else:
        print(json.dumps(data, indent=2))


def cmd_analyze(args):
    """Classify the edges of one parcel"""
    setup_logging(args.verbose)

    try:
        validate_config(get_config())
        parcels = load_parcels(args.parcels, open_data=args.open_data)
        provider = GeoJSONLineProvider.from_file(args.roads, zoom=args.zoom)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load inputs: {e}")
        return 1

    parcel = next((p for p in parcels if p.id == args.parcel_id), None)
    if parcel is None:
        logger.error(f"Parcel not found: {args.parcel_id}")
        return 1

    logger.info(f"Analyzing parcel {parcel.id} ({parcel.full_address})")
    analysis = ParcelEdgeClassifier().analyze(parcel, provider, debug=args.verbose)

    logger.info(f"  Lot type: {analysis.lot_type.value}")
    logger.info(f"  Confidence: {analysis.confidence.value}")
    logger.info(f"  Area: {analysis.area_m2:.1f} sqm")

    _write_json(analysis.to_dict(), args.output)
    if args.edges_output:
        _write_json(edge_feature_collection(analysis), args.edges_output)
        logger.info(f"✓ Edge overlay: {args.edges_output}")

    return 0


def cmd_viewport(args):
    """List the parcels to render for a viewport"""
    setup_logging(args.verbose)

    try:
        parcels = load_parcels(args.parcels, open_data=args.open_data)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load parcels: {e}")
        return 1

    west, south, east, north = args.bbox
    bounds = Bounds(west=west, south=south, east=east, north=north)
    center = tuple(args.center) if args.center else None
    index = build_viewport_index(parcels)

    if args.max_features is not None:
        selected = query_parcels_in_bounds(index, bounds, max_features=args.max_features, center=center)
    else:
        selected = render_parcels(index, bounds, args.zoom, center=center)

    logger.info(f"Selected {len(selected)} of {index.parcel_count} parcels")
    _write_json(
        {"type": "FeatureCollection", "features": [parcel_to_feature(p) for p in selected]},
        args.output,
    )
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Parcel edge classification CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Classify a parcel against road centerlines:
    parcel-edges analyze --parcels parcels.geojson --roads roads.geojson --parcel-id 123

  Parcels to render for a viewport:
    parcel-edges viewport --parcels parcels.geojson --bbox -123.12 49.26 -123.10 49.27 --zoom 15
        """
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    analyze_parser = subparsers.add_parser("analyze", help="Classify the edges of a parcel")
    analyze_parser.add_argument("--parcels", "-p", required=True, help="Parcel GeoJSON FeatureCollection")
    analyze_parser.add_argument("--roads", "-r", required=True, help="Road/lane line GeoJSON FeatureCollection")
    analyze_parser.add_argument("--parcel-id", required=True, help="Parcel id to analyze")
    analyze_parser.add_argument("--open-data", action="store_true", help="Parcels are raw city open-data records")
    analyze_parser.add_argument("--zoom", "-z", type=float, default=18.0, help="Map zoom used for query windows")
    analyze_parser.add_argument("--output", "-o", help="Output JSON file (stdout if not specified)")
    analyze_parser.add_argument("--edges-output", help="Write edge overlay GeoJSON to this file")
    analyze_parser.set_defaults(func=cmd_analyze)

    viewport_parser = subparsers.add_parser("viewport", help="Select parcels inside a viewport")
    viewport_parser.add_argument("--parcels", "-p", required=True, help="Parcel GeoJSON FeatureCollection")
    viewport_parser.add_argument("--open-data", action="store_true", help="Parcels are raw city open-data records")
    viewport_parser.add_argument("--bbox", type=float, nargs=4, required=True,
                                 metavar=("WEST", "SOUTH", "EAST", "NORTH"), help="Viewport bounds")
    viewport_parser.add_argument("--zoom", "-z", type=float, default=15.0, help="Map zoom (sets the render cap)")
    viewport_parser.add_argument("--center", type=float, nargs=2, metavar=("LON", "LAT"), help="Viewport center")
    viewport_parser.add_argument("--max-features", type=int, help="Explicit cap instead of the zoom-based one")
    viewport_parser.add_argument("--output", "-o", help="Output GeoJSON file (stdout if not specified)")
    viewport_parser.set_defaults(func=cmd_viewport)

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
