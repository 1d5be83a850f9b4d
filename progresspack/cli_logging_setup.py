"""
Logging setup and configuration for the progresspack CLI.
"""
import os
import logging
import socket
from logging.handlers import RotatingFileHandler
from pythonjsonlogger import jsonlogger
from progresspack import __version__
from progresspack.utils.logging import LOGGER_NAME

LOG_FILE = os.environ.get('PROGRESSPACK_LOG_FILE', 'progresspack.log')
LOG_LEVEL = os.environ.get('PROGRESSPACK_LOG_LEVEL', 'INFO').upper()
LOG_FORMAT = os.environ.get('PROGRESSPACK_LOG_FORMAT', 'json').lower()
HOSTNAME = socket.gethostname()
PID = os.getpid()
ENV = os.environ.get('PROGRESSPACK_ENV', 'dev')

CONTEXT_FIELDS = ('indicator', 'mode', 'demo', 'operation_id', 'operation', 'params', 'status', 'error_type')


class ProgressJsonFormatter(jsonlogger.JsonFormatter):
    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record['asctime'] = getattr(record, 'asctime', self.formatTime(record, self.datefmt))
        log_record['levelname'] = record.levelname
        log_record['name'] = record.name
        log_record['function'] = record.funcName
        for field in CONTEXT_FIELDS:
            log_record[field] = message_dict.get(field) or getattr(record, field, None)
        log_record['env'] = ENV
        log_record['version'] = __version__
        log_record['hostname'] = HOSTNAME
        log_record['pid'] = PID


def configure_logging(level=None, log_file=None, log_format=None):
    """
    Attach a rotating file handler (5MB x 5) to the progresspack logger.
    JSON records by default, plain text when the format is 'text'.
    Returns the configured logger.
    """
    level = (level or LOG_LEVEL).upper()
    log_file = log_file or LOG_FILE
    log_format = (log_format or LOG_FORMAT).lower()

    handler = RotatingFileHandler(log_file, maxBytes=5*1024*1024, backupCount=5)
    if log_format == 'json':
        formatter = ProgressJsonFormatter('%(asctime)s %(levelname)s %(name)s %(message)s')
    else:
        formatter = logging.Formatter('%(asctime)s [%(levelname)s] %(message)s')
    handler.setFormatter(formatter)

    logger = logging.getLogger(LOGGER_NAME)
    for existing in list(logger.handlers):
        if isinstance(existing, RotatingFileHandler):
            logger.removeHandler(existing)
            existing.close()
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level, logging.INFO))
    logger.propagate = False
    return logger
