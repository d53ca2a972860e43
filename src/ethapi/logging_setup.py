import logging

LOG_FORMAT = '%(asctime)s [%(levelname)-8s] %(name)s.%(funcName)s: %(message)s'


def setup_logging(level: int = logging.INFO):
    """
    Configures the global logging settings for an application embedding the Api.
    This should be called as early as possible during startup.
    """
    logging.basicConfig(level=level, format=LOG_FORMAT)
