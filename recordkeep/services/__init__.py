"""
服务层模块
提供业务逻辑的抽象层，封装复杂的服务流程
"""

from .account_service import AccountService
from .label_service import LabelService
from .memo_service import MemoService
from .contact_service import ContactService

__all__ = [
    "AccountService",
    "LabelService",
    "MemoService",
    "ContactService"
]
