"""Root logging setup; modules log through named loggers (security, api_access, upload, cleanup)"""
import logging
from typing import Optional

from vidtube.core.config import settings

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Client libraries that log every request/retry at INFO
QUIET_LOGGERS = ("botocore", "boto3", "s3transfer", "urllib3", "httpx", "multipart")


def setup_logging(level: Optional[str] = None):
    """Configure the root logger; level defaults to LOG_LEVEL, unknown names fall back to INFO"""
    level_name = (level or settings.LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        force=True
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
