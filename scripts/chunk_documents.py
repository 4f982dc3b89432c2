#!/usr/bin/env python3
"""
Crack and Chunk Documents

Chunks every supported file below a directory and writes the chunks as
JSON Lines, one index record per line with sequential ids.

Usage:
    python scripts/chunk_documents.py --input_data_path data/ --output_file_path chunks.jsonl
    python scripts/chunk_documents.py --input_data_path data/ --output_file_path chunks.jsonl \\
        --config_file config.json --njobs 4

Config file (JSON object, or a list whose first object is used):
    {"chunk_size": 1024, "token_overlap": 128, "min_chunk_size": 10,
     "use_layout": false, "url_prefix": "https://example.com/docs/"}

Environment (.env is loaded):
    OPENAI_API_KEY / AZURE_OPENAI_ENDPOINT / AZURE_OPENAI_API_KEY:
        Needed with --add-embeddings
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

# Add project root to path
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from chunking.exceptions import ChunkingError, format_error_chain
from chunking.logging_config import setup_logging
from chunking.models import ChunkingConfig
from chunking.pipeline import ChunkPipeline
from chunking.storage import ChunkingStorage
from layout import PyMuPDFLayoutAnalyzer
from vector_store import OllamaEmbedder, StoreConfig, create_embedder

CONFIG_KEYS = ("chunk_size", "token_overlap", "min_chunk_size", "use_layout", "url_prefix")

logger = logging.getLogger("chunking.cli")


def load_config_file(path: str) -> dict:
    """Read the chunking options from a JSON config file."""
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, list):
        data = data[0] if data else {}
    return {key: data[key] for key in CONFIG_KEYS if key in data}


def build_config(args: argparse.Namespace) -> ChunkingConfig:
    options = load_config_file(args.config_file) if args.config_file else {}

    # CLI flags override the config file
    overrides = {
        "chunk_size": args.chunk_size,
        "token_overlap": args.token_overlap,
        "min_chunk_size": args.min_chunk_size,
        "url_prefix": args.url_prefix,
    }
    options.update({key: value for key, value in overrides.items() if value is not None})
    if args.use_layout:
        options["use_layout"] = True

    return ChunkingConfig(
        **options,
        add_embeddings=args.add_embeddings,
        strict=args.strict,
        njobs=args.njobs,
    )


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Crack and chunk documents into a JSONL file",
    )
    parser.add_argument("--input_data_path", required=True, help="Directory to chunk")
    parser.add_argument("--output_file_path", required=True, help="JSONL output file")
    parser.add_argument("--config_file", help="JSON file with chunking options")
    parser.add_argument("--njobs", type=int, default=1,
                        help="Worker threads (default: 1)")
    parser.add_argument("--chunk-size", type=int, help="Maximum tokens per chunk (0 = unbounded)")
    parser.add_argument("--token-overlap", type=int, help="Overlap tokens between chunks")
    parser.add_argument("--min-chunk-size", type=int, help="Drop chunks with fewer tokens")
    parser.add_argument("--url-prefix", help="Prefix for chunk URLs")
    parser.add_argument("--use-layout", action="store_true",
                        help="Analyze PDFs in layout mode (headings and tables)")
    parser.add_argument("--add-embeddings", action="store_true",
                        help="Embed every chunk")
    parser.add_argument("--embedding-provider", choices=["openai", "ollama"], default="openai",
                        help="Embedding service (default: openai)")
    parser.add_argument("--embedding-model", help="Embedding model or Azure deployment name")
    parser.add_argument("--strict", action="store_true",
                        help="Fail on unsupported or broken files instead of counting them")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    args = parser.parse_args()

    load_dotenv(ROOT / ".env")
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    input_path = Path(args.input_data_path)
    if not input_path.is_dir():
        logger.error(f"Input directory not found: {input_path}")
        return 1

    try:
        config = build_config(args)
    except (OSError, ValueError) as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    embedder = None
    if config.add_embeddings:
        model = args.embedding_model
        if model is None:
            model = "nomic-embed-text" if args.embedding_provider == "ollama" else "text-embedding-ada-002"
        try:
            embedder = create_embedder(
                StoreConfig(embedding_provider=args.embedding_provider, embedding_model=model)
            )
        except ValueError as e:
            logger.error(f"Embedder could not be created: {e}")
            return 1
        if isinstance(embedder, OllamaEmbedder):
            health = embedder.health_check()
            if not health["healthy"]:
                logger.error(f"Ollama is not ready: {health['error']}")
                return 1

    logger.info("Cracking and chunking documents...")
    try:
        pipeline = ChunkPipeline(config, analyzer=PyMuPDFLayoutAnalyzer(), embedder=embedder)
        result = pipeline.chunk_directory(input_path)
    except ChunkingError as e:
        logger.error(f"Chunking failed:\n{format_error_chain(e)}")
        return 1

    print(f"Processed {result.total_files} files")
    print(f"Unsupported formats: {result.num_unsupported_format_files} files")
    print(f"Files with errors: {result.num_files_with_errors} files")
    print(f"Found {len(result.chunks)} chunks")

    output_path = Path(args.output_file_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    print(f"Writing chunking result to {output_path}...")
    ChunkingStorage(str(output_path.parent)).write_jsonl(result.chunks, output_path)
    print(f"Chunking result written to {output_path}.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
