"""
连接提供者
每次仓储调用打开一个会话，调用结束（包括异常路径）时确定性地释放
"""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError, StatementError
from sqlmodel import Session

from recordkeep.exceptions import CodecError, StorageFailure


@contextmanager
def open_session(engine: Engine) -> Generator[Session, None, None]:
    """
    打开一个作用域会话

    expire_on_commit=False：提交后对象仍可在会话关闭后读取，
    仓储返回的聚合不会因为会话结束而失效。

    Args:
        engine: 数据库引擎

    Yields:
        SQLModel 数据库会话

    Raises:
        StorageFailure: 会话内抛出的任何 SQLAlchemy 错误（原始异常保存在 __cause__）
        CodecError: 绑定参数时编解码失败，原样抛出
    """
    session = Session(engine, expire_on_commit=False)
    try:
        yield session
    except StatementError as exc:
        if isinstance(exc.orig, CodecError):
            raise exc.orig from exc
        raise StorageFailure(f"Storage operation failed: {exc}") from exc
    except SQLAlchemyError as exc:
        raise StorageFailure(f"Storage operation failed: {exc}") from exc
    finally:
        session.close()
