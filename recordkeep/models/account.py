"""
账户域模型 - Users 表
用户名和邮箱在存储层以 NOCASE 排序规则唯一
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import Text, text
from sqlmodel import Field

from recordkeep.codec import IntEnumInteger, UtcTimestampText

from .base import RecordModel


class UserRole(int, Enum):
    """账户角色枚举，按整数序数存储"""
    STANDARD = 0
    PRIVILEGED = 1


class Account(RecordModel, table=True):
    """
    账户表
    系统账户（is_system = True）在更新/删除语句的 WHERE 条件中被排除
    """
    __tablename__ = "Users"

    # 大小写不敏感的唯一约束由 COLLATE NOCASE 的唯一索引保证
    username: str = Field(
        unique=True,
        nullable=False,
        sa_type=Text(collation="NOCASE"),
        sa_column_kwargs={"name": "Username"}
    )

    password_hash: str = Field(nullable=False, sa_type=Text, sa_column_kwargs={"name": "PasswordHash"})

    email: str = Field(
        unique=True,
        nullable=False,
        sa_type=Text(collation="NOCASE"),
        sa_column_kwargs={"name": "Email"}
    )

    # 可选资料字段
    first_name: Optional[str] = Field(default=None, sa_type=Text, sa_column_kwargs={"name": "FirstName"})
    last_name: Optional[str] = Field(default=None, sa_type=Text, sa_column_kwargs={"name": "LastName"})
    phone_number: Optional[str] = Field(default=None, sa_type=Text, sa_column_kwargs={"name": "PhoneNumber"})
    date_of_birth: Optional[datetime] = Field(
        default=None,
        sa_type=UtcTimestampText,
        sa_column_kwargs={"name": "DateOfBirth"}
    )
    bio: Optional[str] = Field(default=None, sa_type=Text, sa_column_kwargs={"name": "Bio"})
    avatar_url: Optional[str] = Field(default=None, sa_type=Text, sa_column_kwargs={"name": "AvatarUrl"})

    role: UserRole = Field(
        default=UserRole.STANDARD,
        nullable=False,
        sa_type=IntEnumInteger(UserRole),
        sa_column_kwargs={"name": "Role", "server_default": text("0")}
    )

    is_active: bool = Field(
        default=True,
        nullable=False,
        sa_column_kwargs={"name": "IsActive", "server_default": text("1")}
    )

    @property
    def full_name(self) -> Optional[str]:
        """名与姓拼接，空白部分被丢弃；两者都为空时返回 None 而不是空串"""
        parts = [part.strip() for part in (self.first_name, self.last_name) if part and part.strip()]
        return " ".join(parts) or None
