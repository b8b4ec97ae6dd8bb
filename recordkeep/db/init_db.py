"""
数据库初始化脚本
负责创建数据库表结构、系统账户和默认标签

建表是幂等的（已存在的表不受影响）；播种失败视为启动失败，
不做部分 schema 恢复，由调用方终止启动。
"""

import logging
import os
import uuid
from pathlib import Path
from typing import Optional

from sqlalchemy import delete, event, func, or_
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine, select

from recordkeep.auth import PasswordHasher
from recordkeep.constants import (
    DEFAULT_LABELS,
    DEFAULT_SAMPLE_PASSWORD,
    DEFAULT_SYSTEM_PASSWORD,
    SAMPLE_ACCOUNTS,
    SYSTEM_EMAIL,
    SYSTEM_USERNAME,
)
from recordkeep.models import (
    Account,
    ContactAddress,
    ContactRecord,
    EmailAddress,
    Label,
    MemoLabel,
    MemoRecord,
    PhoneNumber,
    UserRole,
    utc_now,
)

from .session import open_session

logger = logging.getLogger(__name__)

# create_all 依赖这些表模型已注册到 SQLModel.metadata
TABLE_MODELS = (
    Account,
    Label,
    MemoRecord,
    MemoLabel,
    ContactRecord,
    EmailAddress,
    PhoneNumber,
    ContactAddress,
)


def get_database_path() -> Path:
    """
    获取 SQLite 数据库文件路径
    优先使用环境变量 RECORDKEEP_DB，否则使用用户数据目录下的共享文件
    """
    env_path = os.environ.get("RECORDKEEP_DB", "").strip()
    if env_path:
        return Path(env_path).expanduser()

    data_home = os.environ.get("XDG_DATA_HOME", "").strip()
    base_dir = Path(data_home) if data_home else Path.home() / ".local" / "share"
    folder = base_dir / "recordkeep"
    folder.mkdir(parents=True, exist_ok=True)
    return folder / "recordkeep.db"


def get_database_url() -> str:
    """获取数据库连接 URL"""
    return f"sqlite:///{get_database_path()}"


def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
    # SQLite 默认关闭外键约束，级联删除依赖于此
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_engine(database_url: Optional[str] = None) -> Engine:
    """
    创建并返回数据库引擎

    Args:
        database_url: 显式指定的连接 URL，优先于环境变量

    Returns:
        已注册外键开关的 SQLAlchemy 引擎
    """
    url = database_url or get_database_url()
    echo = os.environ.get("RECORDKEEP_DB_ECHO", "") == "1"
    engine = create_engine(
        url,
        echo=echo,
        connect_args={"check_same_thread": False}  # SQLite 特有配置
    )
    event.listen(engine, "connect", _enable_foreign_keys)
    return engine


def create_tables(engine: Engine) -> None:
    """
    创建所有数据库表
    已存在的表会被跳过，重复执行是空操作
    """
    SQLModel.metadata.create_all(engine)
    logger.info("Database schema initialized at %s", engine.url)


def seed_default_labels(engine: Engine, user_id: uuid.UUID) -> int:
    """
    为用户创建十个默认系统标签
    该用户已拥有任何标签时跳过

    每个标签单独提交，中途失败会留下部分标签集。

    Args:
        engine: 数据库引擎
        user_id: 账户 ID

    Returns:
        新建的标签数量（跳过时为 0）
    """
    with open_session(engine) as session:
        statement = select(Label.id).where(Label.user_id == user_id).limit(1)
        if session.exec(statement).first() is not None:
            logger.debug("Labels already exist for user %s, skipping seed", user_id)
            return 0

        now = utc_now()
        for name, color in DEFAULT_LABELS:
            session.add(Label(
                user_id=user_id,
                name=name,
                color=color,
                is_system=True,
                created_at=now,
                updated_at=now
            ))
            session.commit()

    logger.info("Seeded %d default labels for user %s", len(DEFAULT_LABELS), user_id)
    return len(DEFAULT_LABELS)


def seed_system_account(engine: Engine, password_hash: str) -> Account:
    """
    创建受保护的系统账户
    如果已存在任何 privileged 账户，则返回现有账户

    Args:
        engine: 数据库引擎
        password_hash: 已哈希的密码

    Returns:
        Account 对象（已存在的或新创建的）
    """
    with open_session(engine) as session:
        statement = select(Account).where(Account.role == UserRole.PRIVILEGED)
        existing = session.exec(statement).first()
        if existing:
            logger.debug("Privileged account already exists (ID: %s), skipping seed", existing.id)
            return existing

        now = utc_now()
        account = Account(
            username=SYSTEM_USERNAME,
            password_hash=password_hash,
            email=SYSTEM_EMAIL,
            role=UserRole.PRIVILEGED,
            is_active=True,
            is_system=True,
            created_at=now,
            updated_at=now
        )
        session.add(account)
        session.commit()

    logger.info("Seeded system account '%s' (ID: %s)", SYSTEM_USERNAME, account.id)
    seed_default_labels(engine, account.id)
    return account


def seed_sample_accounts(engine: Engine, password_hash: str) -> int:
    """
    创建示例账户（alice / bob / carol）
    用户名或邮箱已被占用的示例账户会被跳过

    Returns:
        新建的账户数量
    """
    created = 0
    for username, email, first_name, last_name in SAMPLE_ACCOUNTS:
        with open_session(engine) as session:
            statement = select(func.count()).select_from(Account).where(
                or_(Account.username == username, Account.email == email)
            )
            if session.exec(statement).one() > 0:
                continue

            now = utc_now()
            account = Account(
                username=username,
                password_hash=password_hash,
                email=email,
                first_name=first_name,
                last_name=last_name,
                created_at=now,
                updated_at=now
            )
            session.add(account)
            session.commit()

        logger.info("Seeded sample account '%s'", username)
        seed_default_labels(engine, account.id)
        created += 1
    return created


def init_db(engine: Optional[Engine] = None, password_hash: Optional[str] = None) -> Engine:
    """
    完整的数据库初始化流程
    1. 创建数据库引擎（未提供时）
    2. 创建所有表结构
    3. 提供了系统账户密码哈希时，播种系统账户及其默认标签

    Returns:
        使用的数据库引擎
    """
    if engine is None:
        engine = get_engine()

    create_tables(engine)

    if password_hash is not None:
        seed_system_account(engine, password_hash)

    return engine


def reset_database(engine: Engine, hasher: PasswordHasher) -> None:
    """
    清空所有数据并重新播种

    删除全部账户（其余数据经外键级联删除），重新建表，
    再创建系统账户和示例账户。不可逆，只应对管理员开放。
    """
    logger.warning("Database reset initiated, all data will be erased")

    with open_session(engine) as session:
        session.exec(delete(Account))
        session.commit()

    create_tables(engine)
    seed_system_account(engine, hasher.hash(DEFAULT_SYSTEM_PASSWORD))
    seed_sample_accounts(engine, hasher.hash(DEFAULT_SAMPLE_PASSWORD))

    logger.info("Database reset and reseed complete")


if __name__ == "__main__":
    # 直接运行此脚本时，执行数据库初始化
    from recordkeep.auth import BcryptPasswordHasher

    logging.basicConfig(level=logging.INFO)
    init_db(password_hash=BcryptPasswordHasher().hash(DEFAULT_SYSTEM_PASSWORD))
