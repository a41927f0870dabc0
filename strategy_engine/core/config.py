"""
Strategy engine configuration.
All settings come from environment variables with safe defaults.
"""

import os
from pathlib import Path

# Database path configuration
DB_PATH = os.getenv("DB_PATH", "./data/strategy_engine.db")

# Storage backends
KV_PROVIDER = os.getenv("KV_PROVIDER", "sqlite")  # sqlite|memory
FEATURE_STORE_PROVIDER = os.getenv("FEATURE_STORE_PROVIDER", "sqlite")  # sqlite|memory

# Nearest-neighbor retrieval
EMBEDDING_DIMENSION = int(os.getenv("EMBEDDING_DIMENSION", "128"))
RETRIEVAL_CANDIDATE_LIMIT = int(os.getenv("RETRIEVAL_CANDIDATE_LIMIT", "200"))
RETRIEVAL_DEFAULT_TOP_K = int(os.getenv("RETRIEVAL_DEFAULT_TOP_K", "5"))
RETRIEVAL_MAX_TOP_K = int(os.getenv("RETRIEVAL_MAX_TOP_K", "20"))

# Query history caches
EVIDENCE_HISTORY_MAX_ENTRIES = int(os.getenv("EVIDENCE_HISTORY_MAX_ENTRIES", "10"))
EVIDENCE_HISTORY_EXPIRY_DAYS = int(os.getenv("EVIDENCE_HISTORY_EXPIRY_DAYS", "14"))
CRAWL_HISTORY_MAX_ENTRIES = int(os.getenv("CRAWL_HISTORY_MAX_ENTRIES", "20"))
CRAWL_HISTORY_EXPIRY_DAYS = int(os.getenv("CRAWL_HISTORY_EXPIRY_DAYS", "30"))

# Sensitivity analysis
SENSITIVITY_DEFAULT_PERTURBATIONS = int(os.getenv("SENSITIVITY_DEFAULT_PERTURBATIONS", "20"))
SENSITIVITY_MAX_PERTURBATIONS = int(os.getenv("SENSITIVITY_MAX_PERTURBATIONS", "1000"))
SENSITIVITY_SEED = os.getenv("SENSITIVITY_SEED")  # unset -> unseeded

VERSION = "1.0.0"


def get_kv_store():
    """Get configured local key-value store implementation."""
    provider = os.getenv("KV_PROVIDER", KV_PROVIDER)
    if provider == "memory":
        from .kv_store import InMemoryKeyValueStore
        return InMemoryKeyValueStore()

    # Default to SQLite for unknown providers
    from .kv_store import SqliteKeyValueStore
    return SqliteKeyValueStore(DB_PATH)


def get_feature_store():
    """Get configured feature/record store implementation."""
    provider = os.getenv("FEATURE_STORE_PROVIDER", FEATURE_STORE_PROVIDER)
    if provider == "memory":
        from ..vector.feature_store import InMemoryFeatureStore
        return InMemoryFeatureStore()

    from ..vector.feature_store import SqliteFeatureStore
    return SqliteFeatureStore(DB_PATH)


def get_sensitivity_seed():
    """Get the configured sensitivity seed, or None when sampling is unseeded."""
    seed = os.getenv("SENSITIVITY_SEED", SENSITIVITY_SEED)
    if seed is None or not seed.strip():
        return None
    return int(seed)


def debug_enabled():
    """Check if debug mode is enabled."""
    return os.getenv("DEBUG", "false").lower() == "true"


def ensure_db_directory(db_path: str = None):
    """Ensure the database directory exists."""
    Path(db_path or DB_PATH).parent.mkdir(parents=True, exist_ok=True)


def validate_config():
    """Validate configuration and return any issues."""
    issues = []

    if KV_PROVIDER not in ["sqlite", "memory"]:
        issues.append(f"Invalid KV_PROVIDER: {KV_PROVIDER}")

    if FEATURE_STORE_PROVIDER not in ["sqlite", "memory"]:
        issues.append(f"Invalid FEATURE_STORE_PROVIDER: {FEATURE_STORE_PROVIDER}")

    if EMBEDDING_DIMENSION < 1:
        issues.append("EMBEDDING_DIMENSION must be >= 1")

    if RETRIEVAL_MAX_TOP_K < 1:
        issues.append("RETRIEVAL_MAX_TOP_K must be >= 1")

    if not 1 <= RETRIEVAL_DEFAULT_TOP_K <= RETRIEVAL_MAX_TOP_K:
        issues.append("RETRIEVAL_DEFAULT_TOP_K must be between 1 and RETRIEVAL_MAX_TOP_K")

    for name, value in [
        ("EVIDENCE_HISTORY_MAX_ENTRIES", EVIDENCE_HISTORY_MAX_ENTRIES),
        ("EVIDENCE_HISTORY_EXPIRY_DAYS", EVIDENCE_HISTORY_EXPIRY_DAYS),
        ("CRAWL_HISTORY_MAX_ENTRIES", CRAWL_HISTORY_MAX_ENTRIES),
        ("CRAWL_HISTORY_EXPIRY_DAYS", CRAWL_HISTORY_EXPIRY_DAYS),
        ("SENSITIVITY_MAX_PERTURBATIONS", SENSITIVITY_MAX_PERTURBATIONS),
    ]:
        if value < 1:
            issues.append(f"{name} must be >= 1")

    return issues
