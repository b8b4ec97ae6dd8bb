"""
备忘域模型 - Memos 表与 MemoLabels 关联表
Memo.labels 是派生集合，不存储在 Memos 表中
"""

import uuid
from typing import List

from sqlalchemy import Text
from sqlmodel import SQLModel, Field

from recordkeep.codec import IdentifierText

from .base import RecordModel
from .label import Label


class MemoLabel(SQLModel, table=True):
    """
    备忘-标签多对多关联表
    复合主键 (MemoUid, LabelUid)，任一侧删除时级联删除关联行
    """
    __tablename__ = "MemoLabels"

    memo_id: uuid.UUID = Field(
        primary_key=True,
        foreign_key="Memos.Uid",
        ondelete="CASCADE",
        sa_type=IdentifierText,
        sa_column_kwargs={"name": "MemoUid"}
    )

    label_id: uuid.UUID = Field(
        primary_key=True,
        foreign_key="Labels.Uid",
        ondelete="CASCADE",
        sa_type=IdentifierText,
        sa_column_kwargs={"name": "LabelUid"}
    )


class MemoBase(RecordModel):
    """备忘的可存储字段"""

    # 外键：归属用户
    user_id: uuid.UUID = Field(
        foreign_key="Users.Uid",
        ondelete="CASCADE",
        nullable=False,
        index=True,
        sa_type=IdentifierText,
        sa_column_kwargs={"name": "UserUid"}
    )

    # 标题可以为空串，但不能为 NULL
    title: str = Field(default="", nullable=False, sa_type=Text, sa_column_kwargs={"name": "Title", "server_default": ""})

    content: str = Field(nullable=False, sa_type=Text, sa_column_kwargs={"name": "Content"})


class MemoRecord(MemoBase, table=True):
    """Memos 表行"""
    __tablename__ = "Memos"


class Memo(MemoBase):
    """
    备忘聚合
    labels 通过 MemoLabels JOIN Labels 组装，按标签名升序
    """
    labels: List[Label] = Field(default_factory=list)
