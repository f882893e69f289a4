import logging
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


# define a function that will return a logger object

def get_logger(name: str = __name__) -> logging.Logger:
    # Set up logging configuration once; later calls are no-ops
    log_file = os.getenv('GRAPH_RAG_LOG_FILE', 'logs/log.log')
    level = os.getenv('GRAPH_RAG_LOG_LEVEL', 'INFO').upper()

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        logging.basicConfig(
            filename=log_file,
            level=level,
            format='%(asctime)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
    else:
        logging.basicConfig(
            level=level,
            format='%(asctime)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    # Create a logger instance
    logger = logging.getLogger(name)
    return logger
