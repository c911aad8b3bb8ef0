import copy
import json
import logging
from typing import Any, Dict

logger = logging.getLogger(__name__)

CONFIG_PATH = "config.json"

# 附件大小上限：20 MiB
DEFAULT_MAX_ATTACHMENT_BYTES = 20 * 1024 * 1024

DEFAULT_CONFIG: Dict[str, Any] = {
    "db_path": "data/board.db",
    "upload_dir": "data/uploads",
    "log_level": "INFO",
    "board": {
        "page_size": 10,
        "strict_attachments": False,
    },
    "attachment": {
        "max_bytes": DEFAULT_MAX_ATTACHMENT_BYTES,
    },
    "api": {
        "host": "0.0.0.0",
        "port": 8000,
        "enable_docs": True,
        "cors_origins": ["*"],
    },
}


def _merge(defaults: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(defaults)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path: str = CONFIG_PATH) -> Dict[str, Any]:
    """
    读取 config.json，缺失的配置项使用默认值补齐。
    文件不存在时直接返回默认配置。
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            user_config = json.load(f)
    except FileNotFoundError:
        logger.warning(f"未找到配置文件 {path}，使用默认配置")
        return copy.deepcopy(DEFAULT_CONFIG)

    if not isinstance(user_config, dict):
        raise ValueError(f"配置文件 {path} 的顶层必须是 JSON 对象")

    return _merge(DEFAULT_CONFIG, user_config)
