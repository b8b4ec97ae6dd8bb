"""
Repository (DAO) 模块
提供数据库操作的抽象层，封装 CRUD 逻辑
"""

from .account_repository import AccountRepository
from .label_repository import LabelRepository
from .memo_repository import MemoRepository
from .contact_repository import ContactRepository

__all__ = [
    "AccountRepository",
    "LabelRepository",
    "MemoRepository",
    "ContactRepository"
]
