"""
Configuration management for blog_engine.

Values come from environment variables unless passed explicitly, so the
same object serves the API process, the CLI and the tests.
"""

import os

from .constants import (
    DEFAULT_CONNECT_MAX_RETRIES,
    DEFAULT_CONNECT_RETRY_DELAY,
    DEFAULT_DB_NAME,
    DEFAULT_MAX_POOL_SIZE,
)
from .exceptions import ConfigurationError


class BlogConfig:
    """
    Blog engine configuration.

    Example:
        # Using environment variables
        config = BlogConfig()
        manager = ConnectionManager.from_config(config)

        # Or using direct parameters
        config = BlogConfig(mongodb_uri="mongodb://localhost:27017", db_name="blog")
    """

    def __init__(
        self,
        mongodb_uri: str | None = None,
        db_name: str | None = None,
        jwt_secret: str | None = None,
        aws_access_key_id: str | None = None,
        aws_secret_access_key: str | None = None,
        aws_region: str | None = None,
        s3_bucket_name: str | None = None,
        environment: str | None = None,
        max_pool_size: int | None = None,
        connect_max_retries: int | None = None,
        connect_retry_delay: float | None = None,
    ):
        """
        Initialize configuration.

        Args:
            mongodb_uri: MongoDB connection URI (defaults to MONGODB_URI env var)
            db_name: Database name (defaults to DB_NAME env var or "blog")
            jwt_secret: Token signing secret (defaults to JWT_SECRET)
            aws_access_key_id: S3 access key (defaults to AWS_ACCESS_KEY_ID)
            aws_secret_access_key: S3 secret key (defaults to AWS_SECRET_ACCESS_KEY)
            aws_region: S3 region (defaults to AWS_REGION)
            s3_bucket_name: Upload bucket (defaults to S3_BUCKET_NAME)
            environment: Deployment environment (defaults to APP_ENV or "development")
            max_pool_size: Maximum connection pool size (defaults to MONGO_MAX_POOL_SIZE)
            connect_max_retries: Retries after the first failed connect
                (defaults to MONGO_CONNECT_MAX_RETRIES)
            connect_retry_delay: Seconds between connect attempts
                (defaults to MONGO_CONNECT_RETRY_DELAY)
        """
        self.mongodb_uri = mongodb_uri or os.getenv("MONGODB_URI", "")
        self.db_name = db_name or os.getenv("DB_NAME", DEFAULT_DB_NAME)
        self.jwt_secret = jwt_secret or os.getenv("JWT_SECRET", "")
        self.aws_access_key_id = aws_access_key_id or os.getenv("AWS_ACCESS_KEY_ID", "")
        self.aws_secret_access_key = aws_secret_access_key or os.getenv(
            "AWS_SECRET_ACCESS_KEY", ""
        )
        self.aws_region = aws_region or os.getenv("AWS_REGION", "")
        self.s3_bucket_name = s3_bucket_name or os.getenv("S3_BUCKET_NAME", "")
        self.environment = environment or os.getenv("APP_ENV", "development")
        self.max_pool_size = max_pool_size or int(
            os.getenv("MONGO_MAX_POOL_SIZE", str(DEFAULT_MAX_POOL_SIZE))
        )
        if connect_max_retries is None:
            connect_max_retries = int(
                os.getenv("MONGO_CONNECT_MAX_RETRIES", str(DEFAULT_CONNECT_MAX_RETRIES))
            )
        self.connect_max_retries = connect_max_retries
        if connect_retry_delay is None:
            connect_retry_delay = float(
                os.getenv("MONGO_CONNECT_RETRY_DELAY", str(DEFAULT_CONNECT_RETRY_DELAY))
            )
        self.connect_retry_delay = connect_retry_delay

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ConfigurationError: If required configuration is missing or invalid
        """
        if not self.mongodb_uri:
            raise ConfigurationError(
                "MongoDB URI is required. Please set MONGODB_URI in environment variables.",
                config_key="MONGODB_URI",
            )

        if not self.db_name:
            raise ConfigurationError("db_name is required", config_key="DB_NAME")

        if self.max_pool_size < 1:
            raise ConfigurationError(
                f"max_pool_size must be >= 1, got {self.max_pool_size}",
                config_key="MONGO_MAX_POOL_SIZE",
            )

        if self.connect_max_retries < 0:
            raise ConfigurationError(
                f"connect_max_retries must be >= 0, got {self.connect_max_retries}",
                config_key="MONGO_CONNECT_MAX_RETRIES",
            )

        if self.connect_retry_delay < 0:
            raise ConfigurationError(
                f"connect_retry_delay must be >= 0, got {self.connect_retry_delay}",
                config_key="MONGO_CONNECT_RETRY_DELAY",
            )
