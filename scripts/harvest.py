#!/usr/bin/env python3
"""
Command-line harvester: chat export in, flows JSON out.
"""

import argparse
import os
import sys
from pathlib import Path

from flow_harvester.core import config
from flow_harvester.core.errors import ClusteringError, ConfigError, MessageFormatError
from flow_harvester.core.messages import load_chat
from flow_harvester.core.pipeline import harvest
from flow_harvester.flows.build import flows_to_json


def build_parser():
    parser = argparse.ArgumentParser(
        description="Group an exported conversation into disjoint topical flows",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s --input chat.json                      # Write out/flows.json
  %(prog)s --input chat.json --backend file       # Reuse embeddings across runs
  %(prog)s --input chat.json --output -           # Print flows to stdout

Environment variables:
- FLOW_INDEX_BACKEND=mem|file (default mem)
- FLOW_INDEX_PATH=./data/flow_index.json
- FLOW_NEIGHBOR_K=50, FLOW_SEED_CAP=12, FLOW_TITLE_MAX=80
        """
    )

    parser.add_argument(
        "--input", "-i",
        default="chat.json",
        help="Chat export to read (default: chat.json)"
    )

    parser.add_argument(
        "--output", "-o",
        default="out/flows.json",
        help="Where to write flows JSON, '-' for stdout (default: out/flows.json)"
    )

    parser.add_argument(
        "--backend", "-b",
        choices=config.VALID_BACKENDS,
        help="Vector index backend (default: FLOW_INDEX_BACKEND)"
    )

    parser.add_argument(
        "--index-path",
        help="Index file for the file backend (default: FLOW_INDEX_PATH)"
    )

    parser.add_argument(
        "--workers", "-w",
        type=int,
        help="Embedding threads during ingestion (default: FLOW_INGEST_WORKERS)"
    )

    return parser


def main(argv=None):
    """Run the harvester; returns a process exit code."""
    args = build_parser().parse_args(argv)

    try:
        chat = load_chat(args.input)
        store = config.get_vector_store(backend=args.backend, path=args.index_path)
        overrides = {}
        if args.workers is not None:
            overrides["workers"] = args.workers
        result = harvest(chat.messages, store=store, **overrides)
    except MessageFormatError as e:
        print(f"ERROR: {e}")
        return 1
    except ConfigError as e:
        print(f"ERROR: Invalid configuration: {e}")
        return 1
    except ClusteringError as e:
        print(f"ERROR: Clustering failed ({e.kind}): {e}")
        return 1

    payload = flows_to_json(result.flows)
    if args.output == "-":
        print(payload)
    else:
        output = Path(args.output)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(payload + os.linesep, encoding="utf-8")
        print(f"✓ Built {len(result.flows)} flows from {len(result.messages)} messages → {output}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
