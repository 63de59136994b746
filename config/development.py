import os

from .config import Config, db_config

SECRET_KEY = Config.SECRET_KEY
DB_CONFIG = db_config()

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
UNDO_WINDOW_SECONDS = Config.UNDO_WINDOW_SECONDS

# Applies schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Also inserts the default meetings
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "1")))
