import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: str) -> tuple:
    raw = os.getenv(name, default)
    return tuple(part.strip().lower() for part in raw.split(",") if part.strip())


class Config:
    """Base configuration class"""

    # Flask settings
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    MAX_CONTENT_LENGTH = 1 * 1024 * 1024  # JSON bodies only; images go to S3
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    # Google Cloud settings
    GOOGLE_CLOUD_PROJECT = os.getenv("GOOGLE_CLOUD_PROJECT")
    GOOGLE_CLOUD_LOCATION = os.getenv("GOOGLE_CLOUD_LOCATION", "global")
    GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY")

    # Model settings
    DEFAULT_MODEL = os.getenv("DEFAULT_MODEL", "gemini-2.5-flash")
    MODEL_TIMEOUT_SECONDS = float(os.getenv("MODEL_TIMEOUT_SECONDS", "50"))
    MENU_ANALYSIS_STRATEGY = os.getenv("MENU_ANALYSIS_STRATEGY", "basic").lower()

    # Image upload settings
    ALLOWED_IMAGE_HOSTS = _env_list("ALLOWED_IMAGE_HOSTS", "amazonaws.com")
    IMAGE_BUCKET = os.getenv("IMAGE_BUCKET")
    MAX_IMAGE_BYTES = int(os.getenv("MAX_IMAGE_BYTES", str(10 * 1024 * 1024)))

    # Persistence
    SCANS_TABLE = os.getenv("SCANS_TABLE")
    AWS_REGION = os.getenv("AWS_REGION") or os.getenv("AWS_DEFAULT_REGION") or "us-east-1"

    # Metrics
    COST_PER_1K_TOKENS_EUR = float(os.getenv("COST_PER_1K_TOKENS_EUR", "0.0"))
    COST_ALERT_THRESHOLD_EUR = float(os.getenv("COST_ALERT_THRESHOLD_EUR", "0.000045"))  # €0.045 per 1000 scans
    LATENCY_BUDGET_MS = float(os.getenv("LATENCY_BUDGET_MS", "8000"))

    # Identity: the API Gateway authorizer is the source of truth in production
    TRUST_USER_ID_HEADER = _env_bool("TRUST_USER_ID_HEADER", False)

    @staticmethod
    def init_app(app):
        """Initialize app with configuration"""
        pass


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    TRUST_USER_ID_HEADER = _env_bool("TRUST_USER_ID_HEADER", True)


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False


class TestingConfig(Config):
    """Testing configuration"""
    TESTING = True
    GOOGLE_API_KEY = None
    GOOGLE_CLOUD_PROJECT = None
    IMAGE_BUCKET = None
    SCANS_TABLE = None
    TRUST_USER_ID_HEADER = True
    COST_PER_1K_TOKENS_EUR = 0.0


# Configuration dictionary
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
