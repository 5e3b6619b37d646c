import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY") or "edu-center-dev-secret"

    DB_USER = os.environ.get("DB_USER", "root")
    DB_PASSWORD = os.environ.get("DB_PASSWORD", "")
    DB_HOST = os.environ.get("DB_HOST", "localhost")
    DB_PORT = int(os.environ.get("DB_PORT", "3306"))
    DB_NAME = os.environ.get("DB_NAME", "edu_center")

    AUTO_INIT_DB = bool(int(os.environ.get("AUTO_INIT_DB", "0")))

    # Max store writes in flight during one ledger commit
    LEDGER_COMMIT_CONCURRENCY = int(os.environ.get("LEDGER_COMMIT_CONCURRENCY", "8"))
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")


SECRET_KEY = Config.SECRET_KEY
DB_CONFIG = {
    "host": Config.DB_HOST,
    "port": Config.DB_PORT,
    "user": Config.DB_USER,
    "password": Config.DB_PASSWORD,
    "database": Config.DB_NAME,
}

DEBUG = bool(int(os.environ.get("DEBUG", "1")))

AUTO_INIT_DB = Config.AUTO_INIT_DB
LEDGER_COMMIT_CONCURRENCY = Config.LEDGER_COMMIT_CONCURRENCY
LOG_LEVEL = Config.LOG_LEVEL
