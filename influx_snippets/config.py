"""
Configuration module
Centralized configuration from a YAML file or environment variables
"""
import os
from typing import Any, Dict, Optional
from urllib.parse import urlsplit, urlunsplit

import yaml


CONFIG_FILE = os.getenv("SNIPPETS_CONFIG", "config.yaml")


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from YAML file, falling back to environment variables"""
    try:
        with open(config_path or CONFIG_FILE, 'r') as file:
            return yaml.safe_load(file) or {}
    except FileNotFoundError:
        return {
            "influxdb": {
                "host": os.getenv("INFLUXDB_HOST", "http://localhost:8086"),
                "token": os.getenv("INFLUXDB_TOKEN", ""),
                "organization": os.getenv("INFLUXDB_ORGANIZATION", ""),
                "organization_id": os.getenv("INFLUXDB_ORGANIZATION_ID", ""),
                "bucket": os.getenv("INFLUXDB_BUCKET", os.getenv("INFLUX_BUCKET", "")),
                "timeout": int(os.getenv("INFLUXDB_TIMEOUT", "10")),
            },
            "http": {
                "host": os.getenv("HTTP_HOST", "0.0.0.0"),
                "port": int(os.getenv("HTTP_PORT", "8080")),
            },
            "iot_app": {
                "login_database": os.getenv("LOGIN_DATABASE", "logins.db"),
            },
            "logging": {
                "level": os.getenv("LOG_LEVEL", "INFO"),
                "format": os.getenv("LOG_FORMAT", "text"),
            },
        }


def normalize_host_url(url: str) -> str:
    """
    Make sure the host URL carries an http(s) scheme, defaulting to https.

    Cloud hosts are often copied without a scheme, e.g.
    "us-east-1-1.aws.cloud2.influxdata.com".
    """
    url = (url or "").strip()
    if not url:
        raise ValueError("InfluxDB host URL is empty")
    if "://" not in url:
        url = f"https://{url}"
    parts = urlsplit(url)
    if not parts.netloc:
        raise ValueError(f"InfluxDB host URL has no host: {url!r}")
    scheme = parts.scheme.lower()
    if scheme not in ("http", "https"):
        scheme = "https"
    return urlunsplit((scheme, parts.netloc, parts.path, parts.query, parts.fragment))


_config = load_config()
_influx = _config.get("influxdb", {})
_http = _config.get("http", {})

# InfluxDB Configuration
INFLUXDB_HOST = _influx.get("host", "http://localhost:8086")
INFLUXDB_TOKEN = _influx.get("token", "")
INFLUXDB_ORGANIZATION = _influx.get("organization", "")
INFLUXDB_ORGANIZATION_ID = _influx.get("organization_id", "")
INFLUXDB_BUCKET = _influx.get("bucket", "")
INFLUXDB_TIMEOUT = int(_influx.get("timeout", 10))

# HTTP Configuration
HTTP_HOST = _http.get("host", "0.0.0.0")
HTTP_PORT = int(_http.get("port", 8080))

# IoT app
LOGIN_DATABASE = _config.get("iot_app", {}).get("login_database", "logins.db")

# Logging
LOG_LEVEL = _config.get("logging", {}).get("level", "INFO")
LOG_FORMAT = _config.get("logging", {}).get("format", "text")

# API Configuration
API_VERSION = "1.0.0"
