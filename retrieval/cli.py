import argparse
import json
import logging
import sys

from .config import EngineConfig
from .documents import JsonlDocumentSource
from .exceptions import RetrievalError
from .logging_config import setup_logging
from .service import KnowledgeSearchService


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Knowledge-base search engine")
    parser.add_argument("--documents", help="JSONL file with documents (overrides RETRIEVAL_DOCUMENTS_PATH)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    search = sub.add_parser("search", help="Hybrid search with a synthesized answer")
    search.add_argument("query")

    keyword = sub.add_parser("keyword", help="Keyword-only search")
    keyword.add_argument("query")

    index = sub.add_parser("index", help="Index one document")
    index.add_argument("document_id")

    index_all = sub.add_parser("index-all", help="Index all approved documents")
    index_all.add_argument("--skip-unchanged", action="store_true", help="Skip documents whose index is current")

    sub.add_parser("status", help="Show index status")
    sub.add_parser("health", help="Check the embedding backend")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    # stdout carries the JSON result.
    setup_logging(level=logging.DEBUG if args.verbose else logging.INFO, stream=sys.stderr)

    config = EngineConfig.from_env()
    if args.documents:
        config.documents_path = args.documents
    service = KnowledgeSearchService(config, JsonlDocumentSource(config.documents_path))

    try:
        if args.command == "search":
            result = service.search(args.query)
        elif args.command == "keyword":
            result = service.keyword_search(args.query)
        elif args.command == "index":
            result = service.index_document(args.document_id)
        elif args.command == "index-all":
            result = service.index_all_documents(skip_unchanged=args.skip_unchanged)
        elif args.command == "health":
            health = service.provider.health_check()
            print(json.dumps(health, ensure_ascii=False, indent=2))
            return 0 if health.get("healthy") else 1
        else:
            result = service.index_status()
    except RetrievalError as e:
        print(json.dumps({"success": False, "error": str(e)}, ensure_ascii=False, indent=2))
        return 1

    print(json.dumps(result.model_dump(mode="json"), ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
