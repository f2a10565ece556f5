"""Console logging setup for the pipeline scripts."""
import logging


class Colors:
    """ANSI color codes for prettier output."""
    CYAN = '\033[36m'
    GREEN = '\033[32m'
    YELLOW = '\033[33m'
    RED = '\033[31m'
    GRAY = '\033[37m'
    BOLD = '\033[1m'
    RESET = '\033[0m'


class SimpleFormatter(logging.Formatter):
    """Colored single-line messages, one color per level."""
    def format(self, record):
        color = {
            'DEBUG': Colors.GRAY,
            'INFO': Colors.CYAN,
            'WARNING': Colors.YELLOW,
            'ERROR': Colors.RED,
            'CRITICAL': Colors.RED + Colors.BOLD
        }.get(record.levelname, Colors.RESET)
        return f"{color}{record.getMessage()}{Colors.RESET}"


def setup_logging(level=logging.INFO):
    """Replace the root handlers with a single colored console handler."""
    logger = logging.getLogger()
    logger.setLevel(level)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    console = logging.StreamHandler()
    console.setFormatter(SimpleFormatter())
    logger.addHandler(console)
