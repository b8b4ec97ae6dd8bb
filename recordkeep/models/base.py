"""
基础数据模型
所有聚合根与子记录共用的字段：标识符、时间戳和系统记录标记
"""

import os
import threading
import time
import uuid
from datetime import datetime, timezone

from sqlalchemy import text
from sqlmodel import SQLModel, Field

from recordkeep.codec import IdentifierText, UtcTimestampText


def utc_now() -> datetime:
    """当前 UTC 时间（timezone-aware）"""
    return datetime.now(timezone.utc)


# 同一毫秒内用 12 位计数器（rand_a）保证进程内严格递增
_id_lock = threading.Lock()
_last_millis = 0
_counter = 0


def new_id() -> uuid.UUID:
    """
    生成时间有序的 UUID（version 7）

    高 48 位是毫秒级 Unix 时间戳，接着是 12 位计数器，其余为随机位。
    同一进程内生成的 ID 严格递增，按文本排序即按插入先后排序。
    """
    global _last_millis, _counter

    with _id_lock:
        millis = time.time_ns() // 1_000_000
        if millis > _last_millis:
            _last_millis = millis
            # 计数器起点留出一半空间，避免同一毫秒内很快溢出
            _counter = int.from_bytes(os.urandom(2), "big") & 0x7FF
        else:
            _counter += 1
            if _counter > 0xFFF:
                _last_millis += 1
                _counter = 0
        millis, counter = _last_millis, _counter

    rand_b = int.from_bytes(os.urandom(8), "big") & ((1 << 62) - 1)

    value = (millis & ((1 << 48) - 1)) << 80
    value |= 0x7 << 76
    value |= counter << 64
    value |= 0b10 << 62
    value |= rand_b
    return uuid.UUID(int=value)


class RecordModel(SQLModel):
    """
    记录基类

    id 由写入方在插入前生成，之后不再变更；
    is_system 为 True 的记录不能通过常规更新/删除入口修改。
    """
    id: uuid.UUID = Field(
        default_factory=new_id,
        primary_key=True,
        sa_type=IdentifierText,
        sa_column_kwargs={"name": "Uid"}
    )

    is_system: bool = Field(
        default=False,
        nullable=False,
        sa_column_kwargs={"name": "IsSystem", "server_default": text("0")}
    )

    created_at: datetime = Field(
        default_factory=utc_now,
        nullable=False,
        sa_type=UtcTimestampText,
        sa_column_kwargs={"name": "CreatedAt"}
    )

    updated_at: datetime = Field(
        default_factory=utc_now,
        nullable=False,
        sa_type=UtcTimestampText,
        sa_column_kwargs={"name": "UpdatedAt"}
    )
