import logging
import sys


def setup_logging(level: int = logging.INFO) -> None:
    """Configure console logging for the demo and local runs"""

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)

    formatter = logging.Formatter(
        '%(asctime)s | %(name)s | %(levelname)s | %(message)s',
        datefmt='%H:%M:%S'
    )
    console_handler.setFormatter(formatter)

    # Clear existing handlers and add our custom one
    root_logger.handlers.clear()
    root_logger.addHandler(console_handler)

    # Silence noisy loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("openai").setLevel(logging.WARNING)

    # Stage timings log at DEBUG and stay hidden; recorder events log at INFO
    logging.getLogger("salesbot.logging.flight_recorder").setLevel(max(level, logging.INFO))
    logging.getLogger("salesbot").setLevel(level)
