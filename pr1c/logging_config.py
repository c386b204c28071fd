"""
Logging setup for the pr1c command.

The library modules only create loggers; handlers are installed here, and
only by the command line driver.

Author: xwest
"""

import logging
import logging.config
from pathlib import Path
from typing import Optional


def setup_logging(log_level: str = "WARNING", log_file: Optional[str] = None) -> None:
    """
    Configure the ``pr1c`` logger hierarchy.

    Args:
        log_level: Console logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to a rotating log file that receives DEBUG and up
    """
    log_level = log_level.upper()

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)

    config = {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'detailed': {
                'format': '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s',
                'datefmt': '%Y-%m-%d %H:%M:%S'
            },
            'simple': {
                'format': '%(levelname)s - %(name)s - %(message)s'
            },
        },
        'handlers': {
            # stderr, so rendered output on stdout stays clean
            'console': {
                'class': 'logging.StreamHandler',
                'level': log_level,
                'formatter': 'simple',
                'stream': 'ext://sys.stderr'
            },
        },
        'loggers': {
            'pr1c': {
                'level': 'DEBUG' if log_file else log_level,
                'handlers': ['console'],
                'propagate': False
            },
        },
    }

    if log_file:
        config['handlers']['file'] = {
            'class': 'logging.handlers.RotatingFileHandler',
            'level': 'DEBUG',
            'formatter': 'detailed',
            'filename': log_file,
            'maxBytes': 1048576,  # 1MB
            'backupCount': 3,
            'encoding': 'utf8'
        }
        config['loggers']['pr1c']['handlers'].append('file')

    logging.config.dictConfig(config)
