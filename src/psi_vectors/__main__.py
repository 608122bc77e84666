"""CLI entry point for psi-vectors.

Usage:
    # Build a predication index from a triples file (TSV or CSV)
    python -m psi_vectors index semmed.tsv -o semmed.index.json

    # Build PSI vectors from the index
    python -m psi_vectors build --index semmed.index.json
    python -m psi_vectors build --index semmed.index.json --dimensions 1024 --vector-type complex
    python -m psi_vectors build --config build.yaml --output-dir vectors/

    # Settings can also come from the environment
    PSI_INDEX_PATH=semmed.index.json PSI_MIN_FREQUENCY=5 python -m psi_vectors build
"""

from __future__ import annotations

import argparse
import logging
import sys

from .exceptions import PSIError

logger = logging.getLogger("psi_vectors")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _configure_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


def _cmd_index(args: argparse.Namespace) -> None:
    """Build a predication index from a triples file."""
    from .index import PredicationIndex

    _configure_logging(args.log_level)

    index = PredicationIndex.from_triples_file(args.triples, delimiter=args.delimiter)
    path = index.save(args.output)
    logger.info(f"Wrote index with {index.num_docs:,} predications to {path}")


def _cmd_build(args: argparse.Namespace) -> None:
    """Build PSI vectors from a predication index."""
    from .config import load_settings
    from .encoder import PredicationEncoder
    from .exceptions import ConfigurationError
    from .index import PredicationIndex
    from .writer import write_model

    settings = load_settings(
        args.config,
        index_path=args.index,
        min_frequency=args.min_frequency,
        max_frequency=args.max_frequency,
        max_non_alphabet_chars=args.max_non_alphabet_chars,
        min_term_length=args.min_term_length,
        stoplist_path=args.stoplist,
        vector_type=args.vector_type,
        dimensions=args.dimensions,
        seed_length=args.seed_length,
        seed=args.seed,
        deterministic_vectors=True if args.deterministic else None,
        global_weighting=args.global_weighting,
        local_weighting=args.local_weighting,
        output_dir=args.output_dir,
        progress_interval=args.progress_interval,
        log_level=args.log_level,
    )
    _configure_logging(settings.log_level)

    if not settings.index_path:
        raise ConfigurationError("--index (or PSI_INDEX_PATH) must be provided.")

    logger.info(f"Building PSI model from index in: {settings.index_path}")
    logger.info(f"Minimum frequency = {settings.min_frequency}")
    logger.info(f"Maximum frequency = {settings.max_frequency}")
    logger.info(f"Number non-alphabet characters = {settings.max_non_alphabet_chars}")
    logger.info(
        f"Vectors: {settings.vector_type.value}, {settings.dimensions} dimensions"
    )

    index = PredicationIndex.load(settings.index_path)
    encoder = PredicationEncoder(index, settings)
    model = encoder.train()
    written = write_model(model, settings)

    print(model.stats.summary())
    for name, path in written.items():
        print(f"  {name}: {path}")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="psi-vectors",
        description="Predication-based semantic vectors from subject-predicate-object triples",
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # index
    index_parser = subparsers.add_parser("index", help="Build a predication index from triples")
    index_parser.add_argument("triples", help="TSV/CSV file of subject, predicate, object rows")
    index_parser.add_argument("--output", "-o", required=True, help="Index file to write (JSON)")
    index_parser.add_argument(
        "--delimiter",
        help="Column delimiter (default: ',' for .csv files, TAB otherwise)",
    )
    index_parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")

    # build
    build_parser = subparsers.add_parser("build", help="Build PSI vectors from an index")
    build_parser.add_argument("--index", help="Path to the predication index (or PSI_INDEX_PATH)")
    build_parser.add_argument("--config", help="YAML settings file")
    build_parser.add_argument("--min-frequency", type=int, help="Minimum concept term frequency")
    build_parser.add_argument("--max-frequency", type=int, help="Maximum concept term frequency")
    build_parser.add_argument(
        "--max-non-alphabet-chars",
        type=int,
        help="Maximum non-letter characters in a concept term",
    )
    build_parser.add_argument("--min-term-length", type=int, help="Minimum concept term length")
    build_parser.add_argument("--stoplist", help="Stopword file (one term per line)")
    build_parser.add_argument(
        "--vector-type",
        choices=["real", "complex", "binary"],
        help="Vector representation (default: real)",
    )
    build_parser.add_argument("--dimensions", type=int, help="Vector dimensionality (default: 512)")
    build_parser.add_argument(
        "--seed-length",
        type=int,
        help="Non-zero entries per real elemental vector (default: 10)",
    )
    build_parser.add_argument("--seed", type=int, help="Elemental vector seed")
    build_parser.add_argument(
        "--deterministic",
        action="store_true",
        help="Derive each elemental vector from a hash of its key",
    )
    build_parser.add_argument("--global-weighting", choices=["none", "idf"])
    build_parser.add_argument("--local-weighting", choices=["none", "log", "sqrt"])
    build_parser.add_argument("--output-dir", help="Directory for the vector stores (default: .)")
    build_parser.add_argument(
        "--progress-interval",
        type=int,
        help="Log progress every N predications (default: 1000)",
    )
    build_parser.add_argument("--log-level", help="Logging level (default: INFO)")

    args = parser.parse_args(argv)

    commands = {"index": _cmd_index, "build": _cmd_build}
    command = commands.get(args.command)
    if command is None:
        parser.print_help()
        sys.exit(1)

    try:
        command(args)
    except (PSIError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
