# platform_common/log_config.py

import logging
import os
import sys

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def configure_logging(service_name: str, level: str = None) -> logging.Logger:
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    # Access lines are noise next to our own request logging
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    return logging.getLogger(service_name)
