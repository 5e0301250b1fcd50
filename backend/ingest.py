import argparse
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent / "src"))

from config import configure_logging, find_config_path, load_config
from errors import DistrictRAGError
from pipelines import IngestionPipeline


async def run_ingestion(config_path: Path, reset: bool = False) -> dict[str, int]:
    config = load_config(config_path)
    configure_logging(config)

    pipeline = IngestionPipeline.from_config(config, config_path)
    if reset:
        await pipeline.reset()

    documents = await pipeline.load_documents()
    stored = await pipeline.ingest(documents)
    return {
        "documents": len(documents),
        "stored": stored,
        "total_chunks": await pipeline.store.count(),
    }


def main():
    parser = argparse.ArgumentParser(
        description="Ingest district documents into the corpus store"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.toml in project root)",
    )
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Clear the corpus store before ingesting",
    )

    args = parser.parse_args()

    try:
        config_path = find_config_path(args.config)
        results = asyncio.run(run_ingestion(config_path, reset=args.reset))
    except (FileNotFoundError, ValueError, DistrictRAGError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print("\n=== Ingestion Complete ===")
    print(f"Documents processed: {results['documents']}")
    print(f"Chunks newly stored: {results['stored']}")
    print(f"Total chunks in store: {results['total_chunks']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
