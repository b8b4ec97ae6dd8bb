"""
备忘服务层
"""

import uuid
from typing import List, Optional

from recordkeep.models.base import utc_now
from recordkeep.models.memo import Memo
from recordkeep.repositories.memo_repository import MemoRepository


class MemoService:
    """备忘服务类，只负责 ID / 时间戳分配，其余直接委托给仓储"""

    def __init__(self, memo_repository: MemoRepository):
        self.memo_repository = memo_repository

    def get(self, memo_id: uuid.UUID) -> Optional[Memo]:
        return self.memo_repository.get_by_id(memo_id)

    def get_all(self) -> List[Memo]:
        return self.memo_repository.get_all()

    def get_by_user(self, user_id: uuid.UUID) -> List[Memo]:
        return self.memo_repository.get_by_user(user_id)

    def create(self, user_id: uuid.UUID, content: str, title: str = "") -> Memo:
        """
        创建备忘（不带标签，标签通过 add_label 挂上）

        Args:
            user_id: 归属用户 ID
            content: 正文
            title: 标题，可以为空串

        Returns:
            新创建的 Memo 聚合
        """
        now = utc_now()
        memo = Memo(user_id=user_id, title=title, content=content, created_at=now, updated_at=now)
        return self.memo_repository.add(memo)

    def update(self, memo: Memo) -> bool:
        """更新标题和正文，返回是否实际写入"""
        memo.updated_at = utc_now()
        return self.memo_repository.update(memo) > 0

    def delete(self, memo_id: uuid.UUID) -> bool:
        return self.memo_repository.delete(memo_id) > 0

    def add_label(self, memo_id: uuid.UUID, label_id: uuid.UUID) -> None:
        self.memo_repository.add_label(memo_id, label_id)

    def remove_label(self, memo_id: uuid.UUID, label_id: uuid.UUID) -> None:
        self.memo_repository.remove_label(memo_id, label_id)
