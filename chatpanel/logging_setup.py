import logging
import os
import sys


def setup_logging() -> None:
    level = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)
    for h in list(root.handlers):
        root.removeHandler(h)
    sh = logging.StreamHandler(sys.stdout)
    sh.setFormatter(logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s"))
    root.addHandler(sh)

    logging.captureWarnings(True)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    for name in (
        "chatpanel",
        "chatpanel.application.panel",
        "chatpanel.routes",
        "uvicorn.error",
    ):
        logging.getLogger(name).setLevel(level)
