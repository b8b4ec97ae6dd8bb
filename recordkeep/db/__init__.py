"""
数据库模块
提供数据库连接、初始化和管理功能
"""

from .init_db import (
    init_db,
    get_engine,
    get_database_path,
    get_database_url,
    create_tables,
    seed_system_account,
    seed_default_labels,
    seed_sample_accounts,
    reset_database
)
from .session import open_session

__all__ = [
    "init_db",
    "get_engine",
    "get_database_path",
    "get_database_url",
    "create_tables",
    "seed_system_account",
    "seed_default_labels",
    "seed_sample_accounts",
    "reset_database",
    "open_session"
]
