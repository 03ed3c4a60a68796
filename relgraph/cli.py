"""
RELGRAPH Command Line

Runs one inference pass and writes the facts to stdout or a file.

Usage:
    relgraph -f mondial.nt -v
    relgraph --format json --schema public
    relgraph --csv-dir ./data --key flight=airline_code,flight_number
"""

import argparse
import sys
from typing import Dict, List, Optional

from . import __version__
from .core.config import Config
from .core.exceptions import GatewayConnectionError
from .core.logger import Logger
from .core.models import OutputFormat
from .discover.inference_engine import InferenceEngine
from .discover.statistics_gateway import DataFrameStatisticsGateway, create_gateway
from .model.serializers import get_serializer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="relgraph",
        description="Infer keys, dimensions and relationships of a relational schema as a fact graph.",
    )
    parser.add_argument("-f", "--file", default="", help="file to save the output to (N-Triples files use .nt)")
    parser.add_argument("-v", "--verbose", action="store_true", help="output extra logging")
    parser.add_argument("--format", choices=[fmt.value for fmt in OutputFormat], help="output format")
    parser.add_argument("--schema", help="schema to analyze")
    parser.add_argument("--config", help="path to a JSON config file")
    parser.add_argument("--csv-dir", help="analyze the CSV files of a directory instead of a database")
    parser.add_argument(
        "--key", action="append", default=[], metavar="ENTITY=COL[,COL...]",
        help="declared primary key for --csv-dir tables (repeatable)",
    )
    parser.add_argument("--base-iri", help="root IRI of N-Triples output")
    parser.add_argument("--workers", type=int, help="threads for pairwise statistics")
    parser.add_argument("--no-descriptive", action="store_true", help="skip column, data type and distinct count facts")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def parse_keys(declarations: List[str]) -> Dict[str, List[str]]:
    """Parse ``entity=col1,col2`` key declarations."""
    keys = {}
    for declaration in declarations:
        entity, sep, cols = declaration.partition("=")
        if not sep or not entity.strip():
            raise ValueError(f"invalid key declaration {declaration!r}, expected ENTITY=COL[,COL...]")
        keys[entity.strip()] = [col.strip() for col in cols.split(",") if col.strip()]
    return keys


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point of the ``relgraph`` console script."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.workers is not None and args.workers < 1:
        parser.error("--workers must be at least 1")

    config = Config(args.config)
    if args.verbose:
        config.set("logging.level", "DEBUG")
    if args.workers is not None:
        config.set("inference.max_workers", args.workers)
    if args.no_descriptive:
        config.set("inference.include_descriptive", False)

    logger = Logger("cli", config=config)
    if args.verbose:
        Logger.set_level("DEBUG")

    try:
        key_declarations = parse_keys(args.key)
    except ValueError as e:
        parser.error(str(e))

    try:
        output_format = OutputFormat(args.format or config.get("output.format", OutputFormat.NTRIPLES.value))
    except ValueError:
        parser.error(f"unsupported output format {config.get('output.format')!r} in configuration")
    base_iri = args.base_iri or config.get("output.base_iri")
    schema = args.schema or config.get("database.schema", "public")

    try:
        if args.csv_dir:
            gateway = DataFrameStatisticsGateway.from_csv_dir(args.csv_dir, primary_keys=key_declarations)
            logger.info(f"Starting graph extractor for CSV directory {args.csv_dir}")
        else:
            settings = config.connection_settings()
            gateway = create_gateway(settings)
            logger.info(f"Starting graph extractor for {settings.describe()}")

        with gateway:
            engine = InferenceEngine(gateway, config.inference_settings())
            result = engine.run(schema)
    except GatewayConnectionError as e:
        logger.critical(f"Statistics source unavailable: {e}")
        return 1

    serializer = get_serializer(output_format, base_iri)
    if args.file:
        with open(args.file, "w", encoding="utf-8") as out:
            serializer.write(result.facts, out)
        logger.info(f"Wrote {result.summary.total_facts} facts to {args.file}")
    else:
        serializer.write(result.facts, sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
