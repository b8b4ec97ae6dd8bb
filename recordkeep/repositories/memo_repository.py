"""
备忘管理 Repository
提供 Memos 表的增删改查以及 MemoLabels 关联维护
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import delete, update
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.engine import Engine
from sqlmodel import Session, col, select

from recordkeep.db.session import open_session
from recordkeep.models.label import Label
from recordkeep.models.memo import Memo, MemoLabel, MemoRecord

logger = logging.getLogger(__name__)


class MemoRepository:
    """
    备忘数据访问对象

    读取时先取 Memos 行，再通过 MemoLabels JOIN Labels 组装 labels 列表；
    写入只涉及 Memos 行本身，关联通过 add_label / remove_label 维护。
    """

    def __init__(self, engine: Engine):
        """
        初始化 Repository

        Args:
            engine: 数据库引擎
        """
        self.engine = engine

    # ==================== 读取 ====================

    def get_by_id(self, memo_id: uuid.UUID) -> Optional[Memo]:
        """
        根据 ID 获取备忘（含标签）

        Args:
            memo_id: 备忘 ID

        Returns:
            Memo 聚合，不存在则返回 None
        """
        with open_session(self.engine) as session:
            record = session.get(MemoRecord, memo_id)
            if record is None:
                return None
            return self._assemble(session, record)

    def get_all(self) -> List[Memo]:
        """获取所有备忘，按 UpdatedAt 降序（最近修改的在前）"""
        with open_session(self.engine) as session:
            statement = select(MemoRecord).order_by(col(MemoRecord.updated_at).desc())
            return [self._assemble(session, record) for record in session.exec(statement).all()]

    def get_by_user(self, user_id: uuid.UUID) -> List[Memo]:
        """获取某个用户的全部备忘，排序同 get_all"""
        with open_session(self.engine) as session:
            statement = (
                select(MemoRecord)
                .where(MemoRecord.user_id == user_id)
                .order_by(col(MemoRecord.updated_at).desc())
            )
            return [self._assemble(session, record) for record in session.exec(statement).all()]

    def _assemble(self, session: Session, record: MemoRecord) -> Memo:
        statement = (
            select(Label)
            .join(MemoLabel, col(MemoLabel.label_id) == col(Label.id))
            .where(MemoLabel.memo_id == record.id)
            .order_by(Label.name)
        )
        labels = list(session.exec(statement).all())
        return Memo(**record.model_dump(), labels=labels)

    # ==================== 写入 ====================

    def add(self, memo: Memo) -> Memo:
        """
        插入备忘行（memo.labels 不会被写入）

        Args:
            memo: 已分配 ID 和时间戳的备忘聚合

        Returns:
            同一个 Memo 对象
        """
        record = MemoRecord(**memo.model_dump(exclude={"labels"}))
        with open_session(self.engine) as session:
            session.add(record)
            session.commit()
        logger.info("Memo %s created for user %s", memo.id, memo.user_id)
        return memo

    def update(self, memo: Memo) -> int:
        """
        更新备忘的标题和内容

        Returns:
            受影响的行数；备忘不存在时为 0
        """
        statement = (
            update(MemoRecord)
            .where(MemoRecord.id == memo.id)
            .values({
                MemoRecord.title: memo.title,
                MemoRecord.content: memo.content,
                MemoRecord.updated_at: memo.updated_at,
            })
        )
        with open_session(self.engine) as session:
            rows = session.exec(statement).rowcount
            session.commit()

        if rows == 0:
            logger.warning("Update skipped for memo %s (not found)", memo.id)
        else:
            logger.info("Memo %s updated", memo.id)
        return rows

    def delete(self, memo_id: uuid.UUID) -> int:
        """删除备忘，关联行由外键级联删除"""
        statement = delete(MemoRecord).where(MemoRecord.id == memo_id)
        with open_session(self.engine) as session:
            rows = session.exec(statement).rowcount
            session.commit()

        if rows == 0:
            logger.warning("Delete skipped for memo %s (not found)", memo_id)
        else:
            logger.info("Memo %s deleted", memo_id)
        return rows

    # ==================== 标签关联 ====================

    def add_label(self, memo_id: uuid.UUID, label_id: uuid.UUID) -> None:
        """
        给备忘挂上标签（幂等）

        关联已存在时 INSERT ... ON CONFLICT DO NOTHING 不写入任何内容，
        重复调用不会产生重复行，也不会报错。

        Args:
            memo_id: 备忘 ID
            label_id: 标签 ID
        """
        statement = (
            insert(MemoLabel)
            .values(memo_id=memo_id, label_id=label_id)
            .on_conflict_do_nothing()
        )
        with open_session(self.engine) as session:
            session.exec(statement)
            session.commit()
        logger.info("Label %s attached to memo %s", label_id, memo_id)

    def remove_label(self, memo_id: uuid.UUID, label_id: uuid.UUID) -> None:
        """摘除备忘上的标签，关联不存在时什么也不做"""
        statement = delete(MemoLabel).where(
            MemoLabel.memo_id == memo_id,
            MemoLabel.label_id == label_id
        )
        with open_session(self.engine) as session:
            rows = session.exec(statement).rowcount
            session.commit()

        if rows:
            logger.info("Label %s detached from memo %s", label_id, memo_id)
        else:
            logger.debug("Label %s was not attached to memo %s", label_id, memo_id)
