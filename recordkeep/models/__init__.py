"""
数据库模型模块
导出所有表模型、聚合模型和枚举类型
"""

# 账户域
from .account import Account, UserRole
from .label import Label

# 备忘域
from .memo import Memo, MemoBase, MemoLabel, MemoRecord

# 联系人域
from .contact import (
    AddressType,
    Contact,
    ContactAddress,
    ContactBase,
    ContactRecord,
    EmailAddress,
    EmailType,
    PhoneNumber,
    PhoneType,
)

# 基础模型
from .base import RecordModel, new_id, utc_now

# 定义导出的内容
__all__ = [
    # 账户域
    "Account", "UserRole",
    "Label",
    # 备忘域
    "Memo", "MemoBase", "MemoLabel", "MemoRecord",
    # 联系人域
    "Contact", "ContactBase", "ContactRecord",
    "EmailAddress", "EmailType",
    "PhoneNumber", "PhoneType",
    "ContactAddress", "AddressType",
    # 基础模型
    "RecordModel", "new_id", "utc_now"
]
