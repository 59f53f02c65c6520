
import logging
from rich.console import Console
from rich.logging import RichHandler
def setup_logging(level: str = "INFO"):
    # stderr keeps stdout free for the XML report
    logging.basicConfig(level=level, format="%(message)s", datefmt="[%X]",
                        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=False)],
                        force=True)
    return logging.getLogger("junitkit")
