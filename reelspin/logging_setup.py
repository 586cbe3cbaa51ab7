import logging

from flask import g, has_request_context
from pythonjsonlogger import jsonlogger

LOG_FORMAT = '%(asctime)s %(levelname)s %(request_id)s %(name)s %(funcName)s %(lineno)d %(message)s'


# Custom Logging Filter for Request ID
class RequestIdFilter(logging.Filter):
    def filter(self, record):
        record.request_id = g.get('request_id', 'N/A') if has_request_context() else 'N/A'
        return True


def configure_logging(level='INFO', json_format=True, logger_name='reelspin'):
    """
    Attach a single stream handler to the ``reelspin`` logger.

    JSON records are produced with python-json-logger; plain text is used for
    local debugging. Calling this again replaces the previous handler.
    """
    logger = logging.getLogger(logger_name)
    handler = logging.StreamHandler()
    if json_format:
        formatter = jsonlogger.JsonFormatter(LOG_FORMAT)
    else:
        formatter = logging.Formatter('%(asctime)s %(levelname)s [%(request_id)s] %(name)s: %(message)s')
    handler.setFormatter(formatter)
    handler.addFilter(RequestIdFilter())
    if logger.hasHandlers():
        logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(level)
    return logger
