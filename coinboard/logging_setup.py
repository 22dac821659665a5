import logging

FORMAT = "%(asctime)s - %(levelname)s - [%(name)s] - %(message)s"
DATEFMT = "%Y-%m-%d %H:%M:%S"

def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format=FORMAT, datefmt=DATEFMT)
    logging.getLogger("coinboard").setLevel(level.upper())
