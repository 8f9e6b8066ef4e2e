import os
import logging
from dotenv import load_dotenv

load_dotenv()

KWIK_ORIGIN = os.getenv("KWIK_ORIGIN", "https://kwik.cx").rstrip("/")
CATALOG_API = os.getenv("CATALOG_API", "https://anime.apex-cloud.workers.dev").rstrip("/")
CATALOG_ORIGIN = os.getenv("CATALOG_ORIGIN", "https://www.animepah.me").rstrip("/")

REQUEST_TIMEOUT = int(os.getenv("REQUEST_TIMEOUT", "10"))
RESOLVE_TIMEOUT = int(os.getenv("RESOLVE_TIMEOUT", "30"))

DATA_DIR = os.getenv("DATA_DIR", ".")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def setup_logging(level: str | None = None):
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
