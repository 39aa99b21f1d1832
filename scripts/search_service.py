from pathlib import Path
import os
import sys

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from dotenv import load_dotenv

load_dotenv(ROOT / ".env")

from retrieval.app import create_app
from retrieval.logging_config import setup_logging
import uvicorn


def main() -> None:
    setup_logging()
    host = os.environ.get("SEARCH_SERVICE_HOST", "0.0.0.0")
    port = int(os.environ.get("SEARCH_SERVICE_PORT", "8000"))
    uvicorn.run(create_app(), host=host, port=port)


if __name__ == "__main__":
    main()
