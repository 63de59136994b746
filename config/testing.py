from .config import Config, db_config

SECRET_KEY = "test-secret"
DB_CONFIG = {**db_config(), "database": "meeting_attendance_test"}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"
UNDO_WINDOW_SECONDS = 0.5

AUTO_INIT_DB = Config.AUTO_INIT_DB
AUTO_SEED_DB = Config.AUTO_SEED_DB
