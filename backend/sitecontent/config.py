import os
from dotenv import load_dotenv

load_dotenv()

SOURCE_SUBDIRS = ("public", "dist", "views")


def source_dirs_for(root):
    """Directories searched, in order, for static markup under a content root."""
    return [root] + [os.path.join(root, sub) for sub in SOURCE_SUBDIRS]


def _explicit_source_dirs():
    raw = os.getenv("CONTENT_SOURCE_DIRS")
    return [p for p in raw.split(os.pathsep) if p] if raw else None


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", SECRET_KEY)
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Static markup used to seed pages that have no stored sections
    CONTENT_ROOT = os.getenv("CONTENT_ROOT", os.getcwd())
    # None means "derive from CONTENT_ROOT when the app is built"
    CONTENT_SOURCE_DIRS = _explicit_source_dirs()

    # overwrite | merge
    RESEED_POLICY = os.getenv("RESEED_POLICY", "overwrite")

    DEFAULT_LANGUAGE = os.getenv("DEFAULT_LANGUAGE", "en")
    SECONDARY_LANGUAGE = os.getenv("SECONDARY_LANGUAGE", "ta")


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.getenv("DEV_DATABASE_URI", "sqlite:///sitecontent-dev.db")


class TestingConfig(BaseConfig):
    TESTING = True
    LOG_LEVEL = "DEBUG"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    JWT_SECRET_KEY = "test-secret-key-with-enough-length-for-hs256"


class ProductionConfig(BaseConfig):
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URI")


config_by_name = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig
}
