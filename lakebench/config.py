"""
Application settings.

Values come from the environment (or a local `.env` file) and can also be
built from a YCSB-style property map via `settings_from_properties`.
"""

import logging
from typing import Any, Dict, Literal, Mapping, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Lakebench configuration."""

    # Logging
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    LOG_FILE: Optional[str] = None

    # Table store selection
    STORE_BACKEND: Literal["spark", "snowflake"] = "spark"

    # Spark / lakehouse
    SPARK_URL: str = "spark://localhost:7077"
    SPARK_APP_NAME: str = "YCSB - Lakebench"
    SPARK_LAKEHOUSE: Literal["iceberg", "delta"] = "iceberg"
    SPARK_METASTORE_URL: str = "thrift://localhost:9083"
    SPARK_NAMESPACE: str = "spark_catalog.ycsb"
    SPARK_WAREHOUSE_DIR: str = "s3a://warehouse/wh/"
    SPARK_DRIVER_MEMORY: str = "16g"
    SPARK_EXECUTOR_MEMORY: str = "8g"
    OBJECT_STORE_URI: str = "http://localhost:9000"
    OBJECT_STORE_USER: str = "user"
    OBJECT_STORE_PASSWORD: str = "password"

    # Snowflake
    SNOWFLAKE_ACCOUNT: str = "your_account"
    SNOWFLAKE_USER: str = "your_user"
    SNOWFLAKE_PASSWORD: Optional[str] = None
    SNOWFLAKE_WAREHOUSE: Optional[str] = None
    SNOWFLAKE_DATABASE: Optional[str] = None
    SNOWFLAKE_SCHEMA: Optional[str] = None
    SNOWFLAKE_ROLE: Optional[str] = None
    SNOWFLAKE_CONNECT_LOGIN_TIMEOUT: int = 30
    SNOWFLAKE_CONNECT_NETWORK_TIMEOUT: int = 60
    SNOWFLAKE_CONNECT_SOCKET_TIMEOUT: int = 60

    # Adapter core
    RESULT_FILE_PREFIX: str = "./result"
    MAX_ATTEMPTS: int = Field(10, ge=1, description="Attempts per operation")
    FIELD_ORDER: Literal["insertion", "sorted"] = Field(
        "insertion", description="How logical field names are assigned to slots"
    )
    REPORT_PARQUET: bool = False

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )


# YCSB property name -> Settings field.
PROPERTY_ALIASES: Dict[str, str] = {
    "spark.url": "SPARK_URL",
    "spark.lakehouse": "SPARK_LAKEHOUSE",
    "spark.meta_url": "SPARK_METASTORE_URL",
    "spark.namespace": "SPARK_NAMESPACE",
    "spark.resultFile": "RESULT_FILE_PREFIX",
    "spark.objectStore": "OBJECT_STORE_URI",
    "spark.objectStoreUser": "OBJECT_STORE_USER",
    "spark.objectStorePwd": "OBJECT_STORE_PASSWORD",
    "lakebench.store": "STORE_BACKEND",
    "lakebench.maxAttempts": "MAX_ATTEMPTS",
    "lakebench.fieldOrder": "FIELD_ORDER",
    "lakebench.reportParquet": "REPORT_PARQUET",
    "lakebench.logLevel": "LOG_LEVEL",
}


def settings_from_properties(props: Mapping[str, Any]) -> Settings:
    """
    Build settings from a YCSB-style property map.

    Keys not listed in PROPERTY_ALIASES are ignored; anything not given
    falls back to the environment and then to the defaults.
    """
    overrides = {
        PROPERTY_ALIASES[key]: value
        for key, value in props.items()
        if key in PROPERTY_ALIASES
    }
    return Settings(**overrides)


def configure_logging(cfg: Optional[Settings] = None) -> None:
    """Install the process-wide logging configuration."""
    cfg = cfg or settings
    logging.basicConfig(
        level=getattr(logging, cfg.LOG_LEVEL),
        format=cfg.LOG_FORMAT,
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(cfg.LOG_FILE) if cfg.LOG_FILE else logging.NullHandler(),
        ],
    )

    # Connector internals are noisy at INFO.
    logging.getLogger("snowflake.connector.connection").setLevel(logging.WARNING)
    logging.getLogger("snowflake.connector.network").setLevel(logging.WARNING)
    logging.getLogger("py4j").setLevel(logging.WARNING)


settings = Settings()
