"""
账户服务层

封装账户业务规则，包括：
1. 唯一性探测：先查用户名，再查邮箱，命中即拒绝，不做任何写入
2. 系统账户保护：更新/删除前显式检查 is_system，抛出 SystemProtected
3. 跨聚合播种：每个新账户都会获得十个默认标签
4. 凭证校验：登录与修改密码
"""

import logging
import uuid
from datetime import datetime
from typing import List, Optional

from recordkeep.auth import PasswordHasher
from recordkeep.exceptions import DuplicateField, NotFound, SystemProtected, Unauthorized
from recordkeep.models.account import Account, UserRole
from recordkeep.models.base import utc_now
from recordkeep.repositories.account_repository import AccountRepository

from .label_service import LabelService

logger = logging.getLogger(__name__)


class AccountService:
    """
    账户服务类

    仓储层对系统账户的更新/删除只会"静默无效果"，
    本服务负责把这种结果变成调用方可以处理的类型化错误。

    使用示例：
        service = AccountService(AccountRepository(engine), LabelService(LabelRepository(engine)), hasher)
        account = service.create("alice", "alice@example.com", "s3cret")
    """

    def __init__(
        self,
        account_repository: AccountRepository,
        label_service: LabelService,
        hasher: PasswordHasher
    ):
        """
        初始化服务

        Args:
            account_repository: 账户仓储
            label_service: 标签服务（用于新账户的默认标签播种）
            hasher: 密码哈希器
        """
        self.account_repository = account_repository
        self.label_service = label_service
        self.hasher = hasher

    # ==================== 查询 ====================

    def get(self, account_id: uuid.UUID) -> Optional[Account]:
        return self.account_repository.get_by_id(account_id)

    def get_all(self) -> List[Account]:
        return self.account_repository.get_all()

    def get_by_username(self, username: str) -> Optional[Account]:
        return self.account_repository.get_by_username(username)

    def get_by_email(self, email: str) -> Optional[Account]:
        return self.account_repository.get_by_email(email)

    # ==================== 写入 ====================

    def create(
        self,
        username: str,
        email: str,
        password: str,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        phone_number: Optional[str] = None,
        date_of_birth: Optional[datetime] = None,
        bio: Optional[str] = None,
        avatar_url: Optional[str] = None,
        role: UserRole = UserRole.STANDARD
    ) -> Account:
        """
        创建新账户并播种默认标签

        流程：
        1. 用户名探测（大小写不敏感），命中则抛 DuplicateField("username")
        2. 邮箱探测（大小写不敏感），命中则抛 DuplicateField("email")
        3. 哈希密码、分配 ID 和时间戳、插入
        4. 为新账户创建十个默认系统标签

        探测与插入之间没有锁，并发创建同名账户时由列上的 UNIQUE 约束兜底，
        此时抛出的是 StorageFailure。

        Args:
            username: 用户名
            email: 邮箱地址
            password: 明文密码（只存储哈希）

        Returns:
            新创建的 Account 对象

        Raises:
            DuplicateField: 用户名或邮箱已被占用
        """
        if self.account_repository.username_exists(username):
            raise DuplicateField("username", username)
        if self.account_repository.email_exists(email):
            raise DuplicateField("email", email)

        now = utc_now()
        account = Account(
            username=username,
            password_hash=self.hasher.hash(password),
            email=email,
            first_name=first_name,
            last_name=last_name,
            phone_number=phone_number,
            date_of_birth=date_of_birth,
            bio=bio,
            avatar_url=avatar_url,
            role=role,
            is_active=True,
            is_system=False,
            created_at=now,
            updated_at=now
        )
        self.account_repository.add(account)

        self.label_service.seed_default_labels(account.id)
        return account

    def update(self, account: Account) -> Account:
        """
        更新账户资料

        Args:
            account: 携带新字段值的账户对象（is_system 和 created_at 不会被写入）

        Returns:
            更新后的 Account 对象（updated_at 已刷新）

        Raises:
            NotFound: 账户不存在
            SystemProtected: 目标是系统账户
        """
        self._get_mutable(account.id)
        account.updated_at = utc_now()
        self.account_repository.update(account)
        return account

    def delete(self, account_id: uuid.UUID) -> None:
        """
        删除账户（标签、备忘、联系人随之级联删除）

        Raises:
            NotFound: 账户不存在
            SystemProtected: 目标是系统账户
        """
        self._get_mutable(account_id)
        self.account_repository.delete(account_id)

    def change_password(self, account_id: uuid.UUID, current_password: str, new_password: str) -> Account:
        """
        修改密码

        先校验当前密码，再检查系统账户保护。

        Raises:
            NotFound: 账户不存在
            Unauthorized: 当前密码错误
            SystemProtected: 目标是系统账户
        """
        account = self.account_repository.get_by_id(account_id)
        if account is None:
            raise NotFound("Account", account_id)

        if not self.hasher.verify(current_password, account.password_hash):
            logger.warning("Password change rejected for account %s: wrong current password", account_id)
            raise Unauthorized("Current password is incorrect.")

        if account.is_system:
            raise SystemProtected("Account", account_id)

        account.password_hash = self.hasher.hash(new_password)
        account.updated_at = utc_now()
        self.account_repository.update(account)
        return account

    # ==================== 认证 ====================

    def authenticate(self, username: str, password: str) -> Account:
        """
        用户名 + 密码登录

        用户不存在和密码错误返回同一条错误信息，不暴露用户名是否存在。

        Args:
            username: 用户名（大小写不敏感）
            password: 明文密码

        Returns:
            认证通过的 Account 对象

        Raises:
            Unauthorized: 用户不存在、账户已停用或密码错误
        """
        account = self.account_repository.get_by_username(username)
        if account is None:
            logger.warning("Login failed for '%s': unknown username", username)
            raise Unauthorized()

        if not account.is_active:
            logger.warning("Login failed for '%s': account is inactive", username)
            raise Unauthorized("Account is inactive.")

        if not self.hasher.verify(password, account.password_hash):
            logger.warning("Login failed for '%s': wrong password", username)
            raise Unauthorized()

        logger.info("Account '%s' authenticated", account.username)
        return account

    def _get_mutable(self, account_id: uuid.UUID) -> Account:
        account = self.account_repository.get_by_id(account_id)
        if account is None:
            raise NotFound("Account", account_id)
        if account.is_system:
            raise SystemProtected("Account", account_id)
        return account
