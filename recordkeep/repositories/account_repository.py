"""
账户管理 Repository
提供 Users 表的增删改查操作
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import delete, func, update
from sqlalchemy.engine import Engine
from sqlmodel import select

from recordkeep.db.session import open_session
from recordkeep.models.account import Account

logger = logging.getLogger(__name__)


class AccountRepository:
    """
    账户数据访问对象
    封装所有与 Users 表相关的数据库操作

    更新和删除语句的 WHERE 条件中包含 IsSystem = 0，
    命中 0 行（不存在或系统账户）时视为"无效果"，不抛异常；
    区分"不存在"和"受保护"是服务层的职责。
    """

    def __init__(self, engine: Engine):
        """
        初始化 Repository

        Args:
            engine: 数据库引擎，每次调用从中打开独立会话
        """
        self.engine = engine

    def get_by_id(self, account_id: uuid.UUID) -> Optional[Account]:
        """
        根据 ID 获取账户

        Args:
            account_id: 账户 ID

        Returns:
            Account 对象，不存在则返回 None
        """
        with open_session(self.engine) as session:
            return session.get(Account, account_id)

    def get_all(self) -> List[Account]:
        """
        获取所有账户（按用户名升序，大小写不敏感）

        Returns:
            Account 对象列表
        """
        with open_session(self.engine) as session:
            statement = select(Account).order_by(Account.username)
            return list(session.exec(statement).all())

    def get_by_username(self, username: str) -> Optional[Account]:
        """
        根据用户名获取账户（大小写不敏感）

        Args:
            username: 用户名

        Returns:
            Account 对象，不存在则返回 None
        """
        with open_session(self.engine) as session:
            statement = select(Account).where(Account.username == username)
            return session.exec(statement).first()

    def get_by_email(self, email: str) -> Optional[Account]:
        """
        根据邮箱获取账户（大小写不敏感）

        Args:
            email: 邮箱地址

        Returns:
            Account 对象，不存在则返回 None
        """
        with open_session(self.engine) as session:
            statement = select(Account).where(Account.email == email)
            return session.exec(statement).first()

    def username_exists(self, username: str) -> bool:
        """检查用户名是否已被占用（大小写不敏感，只读）"""
        with open_session(self.engine) as session:
            statement = select(func.count()).select_from(Account).where(Account.username == username)
            return session.exec(statement).one() > 0

    def email_exists(self, email: str) -> bool:
        """检查邮箱是否已被占用（大小写不敏感，只读）"""
        with open_session(self.engine) as session:
            statement = select(func.count()).select_from(Account).where(Account.email == email)
            return session.exec(statement).one() > 0

    def add(self, account: Account) -> Account:
        """
        插入新账户

        Args:
            account: 已分配 ID 和时间戳的账户对象

        Returns:
            同一个 Account 对象
        """
        with open_session(self.engine) as session:
            session.add(account)
            session.commit()
        logger.info("Account '%s' created (ID: %s)", account.username, account.id)
        return account

    def update(self, account: Account) -> int:
        """
        更新账户的可变字段（IsSystem 和 CreatedAt 不会被修改）

        Args:
            account: 携带新字段值的账户对象

        Returns:
            受影响的行数；不存在或系统账户时为 0
        """
        statement = (
            update(Account)
            .where(Account.id == account.id, Account.is_system == False)  # noqa: E712
            .values({
                Account.username: account.username,
                Account.password_hash: account.password_hash,
                Account.email: account.email,
                Account.first_name: account.first_name,
                Account.last_name: account.last_name,
                Account.phone_number: account.phone_number,
                Account.date_of_birth: account.date_of_birth,
                Account.bio: account.bio,
                Account.avatar_url: account.avatar_url,
                Account.role: account.role,
                Account.is_active: account.is_active,
                Account.updated_at: account.updated_at,
            })
        )
        with open_session(self.engine) as session:
            rows = session.exec(statement).rowcount
            session.commit()

        if rows == 0:
            logger.warning("Update skipped for account %s (not found or system record)", account.id)
        else:
            logger.info("Account %s updated", account.id)
        return rows

    def delete(self, account_id: uuid.UUID) -> int:
        """
        删除账户，其标签、备忘和联系人由外键级联删除

        Args:
            account_id: 账户 ID

        Returns:
            受影响的行数；不存在或系统账户时为 0
        """
        statement = delete(Account).where(
            Account.id == account_id,
            Account.is_system == False  # noqa: E712
        )
        with open_session(self.engine) as session:
            rows = session.exec(statement).rowcount
            session.commit()

        if rows == 0:
            logger.warning("Delete skipped for account %s (not found or system record)", account_id)
        else:
            logger.info("Account %s deleted", account_id)
        return rows
