import logging
import os
import sys
from pathlib import Path

# Log files live next to this module unless POOLSTATS_LOG_DIR says otherwise
log_dir = Path(os.getenv("POOLSTATS_LOG_DIR", Path(__file__).parent))
log_dir.mkdir(parents=True, exist_ok=True)


def setup_logging(name: str, filename: str) -> logging.Logger:
    logger = logging.getLogger(name)
    logger.setLevel(logging.INFO)

    # Module may be imported more than once under reloaders
    if logger.handlers:
        return logger

    formatter = logging.Formatter('%(asctime)s - %(levelname)s - %(message)s')

    file_handler = logging.FileHandler(log_dir / filename, encoding="utf-8")
    file_handler.setFormatter(formatter)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    return logger


# HTTP surface
api_logger = setup_logging("api_logger", "api_requests.log")

# Fetch, transform and persist pipeline
collector_logger = setup_logging("collector_logger", "collector.log")
