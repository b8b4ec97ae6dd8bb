"""
标签服务层
在 LabelRepository 之上负责时间戳、默认颜色和默认标签集
"""

import uuid
from typing import List, Optional

from recordkeep.constants import DEFAULT_LABEL_COLOR
from recordkeep.db.init_db import seed_default_labels
from recordkeep.models.base import utc_now
from recordkeep.models.label import Label
from recordkeep.repositories.label_repository import LabelRepository


class LabelService:
    """标签服务类"""

    def __init__(self, label_repository: LabelRepository):
        self.label_repository = label_repository

    def get(self, label_id: uuid.UUID) -> Optional[Label]:
        return self.label_repository.get_by_id(label_id)

    def get_all(self) -> List[Label]:
        return self.label_repository.get_all()

    def get_by_user(self, user_id: uuid.UUID) -> List[Label]:
        return self.label_repository.get_by_user(user_id)

    def get_by_name(self, user_id: uuid.UUID, name: str) -> Optional[Label]:
        return self.label_repository.get_by_name(user_id, name)

    def create(
        self,
        user_id: uuid.UUID,
        name: str,
        color: Optional[str] = None,
        description: Optional[str] = None
    ) -> Label:
        """
        创建标签

        不检查同名标签，需要"按名称去重"时使用 get_or_create。

        Args:
            user_id: 归属用户 ID
            name: 标签名称
            color: 十六进制颜色，缺省为中性灰
            description: 描述

        Returns:
            新创建的 Label 对象
        """
        now = utc_now()
        label = Label(
            user_id=user_id,
            name=name,
            description=description,
            color=color or DEFAULT_LABEL_COLOR,
            created_at=now,
            updated_at=now
        )
        return self.label_repository.add(label)

    def get_or_create(
        self,
        user_id: uuid.UUID,
        name: str,
        color: Optional[str] = None,
        description: Optional[str] = None
    ) -> Label:
        """
        按名称（大小写不敏感）获取用户的标签，不存在则创建

        查询和插入之间没有锁，并发调用仍可能产生同名标签。

        Returns:
            Label 对象（已存在的或新创建的）
        """
        label = self.label_repository.get_by_name(user_id, name)
        if label:
            return label
        return self.create(user_id, name, color=color, description=description)

    def update(self, label: Label) -> bool:
        """
        更新标签，刷新 updated_at

        Returns:
            是否实际写入（标签不存在时为 False）
        """
        label.updated_at = utc_now()
        return self.label_repository.update(label) > 0

    def delete(self, label_id: uuid.UUID) -> bool:
        """删除标签，所有备忘上的该标签关联随之删除"""
        return self.label_repository.delete(label_id) > 0

    def seed_default_labels(self, user_id: uuid.UUID) -> int:
        """
        为用户创建十个默认系统标签（与系统账户播种共用 init_db.seed_default_labels）

        Args:
            user_id: 账户 ID

        Returns:
            新建的标签数量（用户已有标签时跳过，返回 0）
        """
        return seed_default_labels(self.label_repository.engine, user_id)
