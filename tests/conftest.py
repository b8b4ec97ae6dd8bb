"""
Pytest 测试配置
提供测试数据库、仓储、服务和测试数据等测试基础设施
"""

import sys
from pathlib import Path

import pytest

# 添加项目根目录到 sys.path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from recordkeep.db.init_db import create_tables, get_engine, seed_system_account
from recordkeep.constants import DEFAULT_SYSTEM_PASSWORD
from recordkeep.models import Account, Label
from recordkeep.repositories import (
    AccountRepository,
    ContactRepository,
    LabelRepository,
    MemoRepository,
)
from recordkeep.services import (
    AccountService,
    ContactService,
    LabelService,
    MemoService,
)


class FakePasswordHasher:
    """
    测试用哈希器
    确定性、无开销，避免服务层测试被 bcrypt 拖慢
    """

    def hash(self, plain_password: str) -> str:
        return f"fake${plain_password[::-1]}"

    def verify(self, plain_password: str, password_hash: str) -> bool:
        return password_hash == self.hash(plain_password)


# ==================== 数据库 Fixtures ====================

@pytest.fixture(scope="function")
def test_db_engine(tmp_path):
    """
    创建测试用的数据库引擎
    每个测试函数都会获得一个全新的 SQLite 文件（外键开关与生产环境一致）
    """
    engine = get_engine(f"sqlite:///{tmp_path / 'recordkeep-test.db'}")

    # 创建所有表
    create_tables(engine)

    yield engine

    engine.dispose()


@pytest.fixture(scope="function")
def hasher() -> FakePasswordHasher:
    return FakePasswordHasher()


# ==================== Repository Fixtures ====================

@pytest.fixture(scope="function")
def account_repository(test_db_engine) -> AccountRepository:
    return AccountRepository(test_db_engine)


@pytest.fixture(scope="function")
def label_repository(test_db_engine) -> LabelRepository:
    return LabelRepository(test_db_engine)


@pytest.fixture(scope="function")
def memo_repository(test_db_engine) -> MemoRepository:
    return MemoRepository(test_db_engine)


@pytest.fixture(scope="function")
def contact_repository(test_db_engine) -> ContactRepository:
    return ContactRepository(test_db_engine)


# ==================== Service Fixtures ====================

@pytest.fixture(scope="function")
def label_service(label_repository) -> LabelService:
    return LabelService(label_repository)


@pytest.fixture(scope="function")
def account_service(account_repository, label_service, hasher) -> AccountService:
    return AccountService(account_repository, label_service, hasher)


@pytest.fixture(scope="function")
def memo_service(memo_repository) -> MemoService:
    return MemoService(memo_repository)


@pytest.fixture(scope="function")
def contact_service(contact_repository) -> ContactService:
    return ContactService(contact_repository)


# ==================== 测试数据 Fixtures ====================

@pytest.fixture(scope="function")
def test_account(account_service: AccountService) -> Account:
    """
    创建测试账户（同时会播种十个默认标签）
    """
    return account_service.create(
        username="alice",
        email="alice@example.com",
        password="Secret123!",
        first_name="Alice",
        last_name="Johnson"
    )


@pytest.fixture(scope="function")
def system_account(test_db_engine, hasher) -> Account:
    """
    创建受保护的系统账户
    """
    return seed_system_account(test_db_engine, hasher.hash(DEFAULT_SYSTEM_PASSWORD))


@pytest.fixture(scope="function")
def test_label(label_service: LabelService, test_account: Account) -> Label:
    """
    创建一个用户自建（非系统）标签
    """
    return label_service.create(test_account.id, "Reading", color="#123456", description="Books to read")


# ==================== Pytest 配置 ====================

def pytest_configure(config):
    """
    Pytest 初始化配置
    """
    # 标记测试分类
    config.addinivalue_line(
        "markers", "unit: Unit tests"
    )
    config.addinivalue_line(
        "markers", "slow: Slow running tests"
    )
