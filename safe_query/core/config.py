# safe_query/core/config.py
"""
Library configuration - single source of truth for all settings.
"""
import os
from dataclasses import dataclass, field
from typing import Optional
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class PolicySettings:
    """Default warn/throw policy applied to new SafeQuery engines."""
    warn_enabled: bool = field(default_factory=lambda: _env_flag("SAFE_QUERY_WARN", "true"))
    throw_enabled: bool = field(default_factory=lambda: _env_flag("SAFE_QUERY_THROW", "false"))
    # Fraction of query fields an index prefix must cover
    min_coverage: float = field(default_factory=lambda: float(os.getenv("SAFE_QUERY_MIN_COVERAGE", "0.5")))


@dataclass
class DatabaseSettings:
    """MongoDB connection configuration."""
    mongo_url: str = field(default_factory=lambda: os.getenv("MONGODB_URL", "mongodb://localhost:27017"))
    database_name: Optional[str] = field(default_factory=lambda: os.getenv("MONGODB_DATABASE"))
    server_selection_timeout_ms: int = field(default_factory=lambda: int(os.getenv("MONGODB_TIMEOUT_MS", "5000")))


@dataclass
class Settings:
    """Main library settings."""
    policy: PolicySettings = field(default_factory=PolicySettings)
    database: DatabaseSettings = field(default_factory=DatabaseSettings)
    debug: bool = field(default_factory=lambda: _env_flag("SAFE_QUERY_DEBUG", "false"))


# Singleton instance
settings = Settings()
