import logging
import logging.config
from pathlib import Path


def setup_logging(tracker_config, debug: bool = False) -> logging.Logger:
    """Настройка логирования из TrackerConfig (консоль + ротация файла)"""
    if tracker_config.log_to_file:
        Path(tracker_config.log_dir).mkdir(exist_ok=True, parents=True)

    logging.config.dictConfig(tracker_config.get_logging_config())

    logger = logging.getLogger()
    if debug:
        logger.setLevel(logging.DEBUG)
    return logger
