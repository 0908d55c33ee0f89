import logging
import os
from logging.handlers import RotatingFileHandler

from centerfinder import config

FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"

def setup(level=None):
    if level is None:
        level = getattr(logging, config.LOG_LEVEL, logging.INFO)
    logging.basicConfig(level=level, format=FORMAT)
    lg = logging.getLogger("request.raw")
    lg.setLevel(level)
    if not lg.handlers:
        os.makedirs(config.LOG_DIR, exist_ok=True)
        path = os.path.join(config.LOG_DIR, "requests.log")
        handler = RotatingFileHandler(path, maxBytes=10*1024*1024, backupCount=5, encoding="utf-8")
        handler.setFormatter(logging.Formatter(FORMAT))
        lg.addHandler(handler)
    lg.propagate = False
    return logging.getLogger("centerfinder")
