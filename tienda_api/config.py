from __future__ import annotations

# tienda_api/config.py
import os
from dataclasses import dataclass, field

import yaml

# 配置解析顺序（每一项独立解析）：
# 1) 环境变量（最高优先级）
# 2) config.yaml（路径可由 TIENDA_CONFIG 覆盖）
# 3) 内置默认值
_PROJECT_ROOT = os.path.dirname(os.path.dirname(__file__))
_DEFAULT_CFG = os.path.join(_PROJECT_ROOT, "config.yaml")

DEFAULTS = {
    "db_path": "./tienda_api.sqlite",
    "host": "127.0.0.1",
    "port": 3000,
    "log_level": "INFO",
    "cors_origins": ["*"],
}


@dataclass
class Settings:
    db_path: str = DEFAULTS["db_path"]
    host: str = DEFAULTS["host"]
    port: int = DEFAULTS["port"]
    log_level: str = DEFAULTS["log_level"]
    cors_origins: list[str] = field(default_factory=lambda: list(DEFAULTS["cors_origins"]))


def _read_config_yaml(path: str | None = None) -> dict:
    cfg_path = path or os.environ.get("TIENDA_CONFIG") or _DEFAULT_CFG
    if not os.path.exists(cfg_path):
        return {}
    try:
        with open(cfg_path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError):
        return {}
    return cfg if isinstance(cfg, dict) else {}


def _split_origins(value) -> list[str]:
    if isinstance(value, str):
        return [o.strip() for o in value.split(",") if o.strip()]
    if isinstance(value, (list, tuple)):
        return [str(o).strip() for o in value if str(o).strip()]
    return []


def get_settings(config_path: str | None = None) -> Settings:
    cfg = _read_config_yaml(config_path)

    def pick(env_key: str, cfg_key: str):
        env_val = os.environ.get(env_key)
        if env_val is not None and env_val.strip():
            return env_val.strip()
        cfg_val = cfg.get(cfg_key)
        if cfg_val is not None and str(cfg_val).strip():
            return cfg_val
        return DEFAULTS[cfg_key]

    try:
        port = int(pick("PORT", "port"))
    except (TypeError, ValueError):
        port = DEFAULTS["port"]

    origins = _split_origins(pick("CORS_ORIGINS", "cors_origins")) or list(DEFAULTS["cors_origins"])

    return Settings(
        db_path=str(pick("DB_FILE", "db_path")),
        host=str(pick("HOST", "host")),
        port=port,
        log_level=str(pick("LOG_LEVEL", "log_level")).upper(),
        cors_origins=origins,
    )
