import os

from .config import Config, db_config

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")
DB_CONFIG = db_config()

DEBUG = False
LOG_LEVEL = Config.LOG_LEVEL
UNDO_WINDOW_SECONDS = Config.UNDO_WINDOW_SECONDS

AUTO_INIT_DB = Config.AUTO_INIT_DB
AUTO_SEED_DB = Config.AUTO_SEED_DB
