"""
标签管理 Repository
提供 Labels 表的增删改查操作
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import delete, update
from sqlalchemy.engine import Engine
from sqlmodel import select

from recordkeep.db.session import open_session
from recordkeep.models.label import Label

logger = logging.getLogger(__name__)


class LabelRepository:
    """
    标签数据访问对象
    删除标签时，MemoLabels 中引用它的关联行由外键级联删除
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    def get_by_id(self, label_id: uuid.UUID) -> Optional[Label]:
        with open_session(self.engine) as session:
            return session.get(Label, label_id)

    def get_all(self) -> List[Label]:
        """获取所有标签（按名称升序）"""
        with open_session(self.engine) as session:
            statement = select(Label).order_by(Label.name)
            return list(session.exec(statement).all())

    def get_by_user(self, user_id: uuid.UUID) -> List[Label]:
        """获取某个用户的全部标签（按名称升序）"""
        with open_session(self.engine) as session:
            statement = select(Label).where(Label.user_id == user_id).order_by(Label.name)
            return list(session.exec(statement).all())

    def get_by_name(self, user_id: uuid.UUID, name: str) -> Optional[Label]:
        """
        按名称查找用户的标签（大小写不敏感）

        名称没有唯一约束，存在多条同名标签时返回最早创建的一条。

        Args:
            user_id: 归属用户 ID
            name: 标签名称

        Returns:
            Label 对象，不存在则返回 None
        """
        with open_session(self.engine) as session:
            statement = (
                select(Label)
                .where(Label.user_id == user_id, Label.name == name)
                .order_by(Label.created_at, Label.id)
            )
            return session.exec(statement).first()

    def add(self, label: Label) -> Label:
        with open_session(self.engine) as session:
            session.add(label)
            session.commit()
        logger.info("Label '%s' created for user %s", label.name, label.user_id)
        return label

    def update(self, label: Label) -> int:
        """
        更新标签的名称、描述和颜色

        Returns:
            受影响的行数；标签不存在时为 0
        """
        statement = (
            update(Label)
            .where(Label.id == label.id)
            .values({
                Label.name: label.name,
                Label.description: label.description,
                Label.color: label.color,
                Label.updated_at: label.updated_at,
            })
        )
        with open_session(self.engine) as session:
            rows = session.exec(statement).rowcount
            session.commit()

        if rows == 0:
            logger.warning("Update skipped for label %s (not found)", label.id)
        else:
            logger.info("Label %s updated", label.id)
        return rows

    def delete(self, label_id: uuid.UUID) -> int:
        statement = delete(Label).where(Label.id == label_id)
        with open_session(self.engine) as session:
            rows = session.exec(statement).rowcount
            session.commit()

        if rows == 0:
            logger.warning("Delete skipped for label %s (not found)", label_id)
        else:
            logger.info("Label %s deleted", label_id)
        return rows
