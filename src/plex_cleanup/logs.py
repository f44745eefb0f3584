import logging
import sys


# Between INFO and DEBUG: individual deletions shown with a single -v.
VERBOSE = 15
logging.addLevelName(VERBOSE, "VERBOSE")

LOG_FORMAT = "%(asctime)s: %(message)s"
DATE_FORMAT = "%Y/%m/%d %H:%M:%S"

_LEVEL_BY_VERBOSITY = {0: logging.INFO, 1: VERBOSE}


def level_for_verbosity(verbosity: int) -> int:
    return _LEVEL_BY_VERBOSITY.get(max(int(verbosity), 0), logging.DEBUG)


def configure_logging(verbosity: int = 0) -> None:
    # Third-party loggers stay at WARNING; only our own tree follows -v.
    logging.basicConfig(level=logging.WARNING, format=LOG_FORMAT, datefmt=DATE_FORMAT, stream=sys.stdout)
    logging.getLogger("plex_cleanup").setLevel(level_for_verbosity(verbosity))
