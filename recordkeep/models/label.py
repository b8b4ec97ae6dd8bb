"""
标签域模型 - Labels 表
"""

import uuid
from typing import Optional

from sqlalchemy import Text
from sqlmodel import Field

from recordkeep.constants import DEFAULT_LABEL_COLOR
from recordkeep.codec import IdentifierText

from .base import RecordModel


class Label(RecordModel, table=True):
    """
    标签表

    同一用户下名称"通常唯一"：表上没有 (UserUid, Name) 唯一约束，
    只有大小写不敏感的查找辅助方法（见 LabelService.get_or_create）
    """
    __tablename__ = "Labels"

    # 外键：归属用户，用户删除时级联删除
    user_id: uuid.UUID = Field(
        foreign_key="Users.Uid",
        ondelete="CASCADE",
        nullable=False,
        index=True,
        sa_type=IdentifierText,
        sa_column_kwargs={"name": "UserUid"}
    )

    name: str = Field(nullable=False, sa_type=Text(collation="NOCASE"), sa_column_kwargs={"name": "Name"})

    description: Optional[str] = Field(default=None, sa_type=Text, sa_column_kwargs={"name": "Description"})

    # 十六进制颜色，默认中性灰
    color: str = Field(
        default=DEFAULT_LABEL_COLOR,
        nullable=False,
        sa_type=Text,
        sa_column_kwargs={"name": "Color", "server_default": DEFAULT_LABEL_COLOR}
    )
