from env.env import (
    Environment,
    LoggingEnvironment,
    get_env,
    reset_env_caches,
    get_logging_env,
    ConfigError,
    DEFAULT_MAX_BACKUP_INDEX,
    MATCH_MODES,
    _load_dotenv,
)

from env.paths import PROJECT_ROOT, CONFIG_DIR, logs_dir, resolve_log_file

__all__ = [
    "Environment",
    "LoggingEnvironment",
    "get_env",
    "reset_env_caches",
    "get_logging_env",
    "ConfigError",
    "DEFAULT_MAX_BACKUP_INDEX",
    "MATCH_MODES",
    "PROJECT_ROOT",
    "CONFIG_DIR",
    "logs_dir",
    "resolve_log_file",
    "_load_dotenv",
]
