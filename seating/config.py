import logging
import os
from pathlib import Path


DATABASE_URL = os.getenv("SEATING_DATABASE_URL", "sqlite:///./seat_allocator.db")

EXPORT_DIR = Path(
    os.getenv("SEATING_EXPORT_DIR", Path(__file__).resolve().parent / "exports")
)

LOG_LEVEL = os.getenv("SEATING_LOG_LEVEL", "INFO")

# one of seating.allocator.STRATEGIES
ALLOCATION_STRATEGY = os.getenv("SEATING_STRATEGY", "room_major")

REPORT_HEADER_LINE1 = os.getenv("SEATING_REPORT_HEADER_LINE1", "")
REPORT_HEADER_LINE2 = os.getenv("SEATING_REPORT_HEADER_LINE2", "")

PDF_FONT_SIZE = int(os.getenv("SEATING_PDF_FONT_SIZE", "10"))


def configure_logging(level=None):
    logging.basicConfig(
        level=(level or LOG_LEVEL).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
