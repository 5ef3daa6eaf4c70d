"""配置常量模块 -- 可通过环境变量覆盖

包含数据库路径、持久化集合键、报名编号前缀等可配置常量。
"""

import os
from pathlib import Path


def _get_base_dir() -> Path:
    """获取项目 data 基础目录"""
    return Path(os.environ.get("EVENTDESK_DATA_DIR", "data"))


def get_db_path() -> str:
    """获取 SQLite 数据库路径"""
    return os.environ.get(
        "EVENTDESK_DB_PATH",
        str(_get_base_dir() / "sqlite" / "eventdesk.db"),
    )


def get_collection_key() -> str:
    """获取活动集合的持久化键（整个集合序列化后存在此键下）"""
    return os.environ.get("EVENTDESK_COLLECTION_KEY", DEFAULT_COLLECTION_KEY)


# 与浏览器版本 localStorage 键保持一致，便于导入旧数据
DEFAULT_COLLECTION_KEY: str = "event-manager-db"

# 学生报名编号前缀，例如 CAM-4821-CSE
REGISTRATION_ID_PREFIX: str = os.environ.get("EVENTDESK_REGISTRATION_PREFIX", "CAM")

# 报名编号生成的最大重试次数（同一活动内需唯一）
REGISTRATION_ID_MAX_ATTEMPTS: int = 20
