"""
存储边界的标量编解码
UUID、UTC 时间戳和字符串列表与 SQLite 原生列值之间的双向转换

纯函数负责编解码规则，TypeDecorator 只是把它们挂到列类型上，
这样模型字段读写时自动经过同一套规则。
"""

import json
import re
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable, List, Optional, Type

from sqlalchemy.types import Integer, Text, TypeDecorator

from recordkeep.exceptions import MalformedIdentifier, MalformedTimestamp

# 其他写入方会产生 7 位小数秒（100ns 精度）；Python 3.10 的 fromisoformat 只接受 3 或 6 位
_FRACTION = re.compile(r"\.(\d+)")


# ==================== 标识符 ====================

def encode_identifier(value: Any) -> str:
    """
    UUID -> 标准带连字符的小写十六进制字符串

    Args:
        value: uuid.UUID 或可解析为 UUID 的字符串

    Returns:
        规范化的 UUID 文本

    Raises:
        MalformedIdentifier: 输入无法解析为 UUID
    """
    if isinstance(value, uuid.UUID):
        return str(value)
    return str(decode_identifier(value))


def decode_identifier(value: Any) -> uuid.UUID:
    """
    文本 -> UUID

    Raises:
        MalformedIdentifier: 文本不是合法的 UUID
    """
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value).strip())
    except (ValueError, TypeError, AttributeError) as exc:
        raise MalformedIdentifier(value) from exc


# ==================== 时间戳 ====================

def encode_timestamp(value: datetime) -> str:
    """
    datetime -> 带偏移量的 ISO-8601 文本（始终为 UTC，精确到微秒）

    不带时区信息的值按 UTC 处理。固定微秒精度和 +00:00 偏移，
    保证文本的字典序与时间先后一致（列表排序依赖这一点）。
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    else:
        value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="microseconds")


def _normalize_fraction(match: "re.Match[str]") -> str:
    return "." + match.group(1)[:6].ljust(6, "0")


def decode_timestamp(value: Any) -> datetime:
    """
    ISO-8601 文本 -> UTC datetime

    无偏移信息的值视为 UTC；带偏移的值换算到 UTC。
    接受结尾的 "Z" 以及任意位数的小数秒（截断或补零到 6 位）。

    Raises:
        MalformedTimestamp: 文本无法按 ISO-8601 解析
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text[-1:] in ("Z", "z"):
            text = text[:-1] + "+00:00"
        text = _FRACTION.sub(_normalize_fraction, text, count=1)
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as exc:
            raise MalformedTimestamp(value) from exc

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


# ==================== 字符串列表 ====================

def encode_string_list(value: Optional[Iterable[str]]) -> str:
    """
    字符串列表 -> JSON 数组文本，None 或空列表编码为 "[]"

    Raises:
        TypeError: 列表中含有非字符串元素
    """
    if value is None:
        return "[]"
    items = list(value)
    for item in items:
        if not isinstance(item, str):
            raise TypeError(f"String list expects str items, got {type(item)!r}")
    return json.dumps(items, ensure_ascii=False)


def decode_string_list(value: Any) -> List[str]:
    """
    JSON 数组文本 -> 字符串列表

    读取宽松：NULL、空白或无法解析的内容一律返回空列表，不抛异常。
    """
    if value is None:
        return []
    if isinstance(value, list):
        return [item for item in value if isinstance(item, str)]
    text = str(value)
    if not text.strip():
        return []
    try:
        parsed = json.loads(text)
    except ValueError:
        return []
    if not isinstance(parsed, list):
        return []
    return [item for item in parsed if isinstance(item, str)]


# ==================== 列类型 ====================

class IdentifierText(TypeDecorator):
    """以 TEXT 存储的 UUID"""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return encode_identifier(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return decode_identifier(value)


class UtcTimestampText(TypeDecorator):
    """以 ISO-8601 TEXT 存储的 UTC 时间戳，读出时不信任驱动的时区标记"""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, str):
            value = decode_timestamp(value)
        return encode_timestamp(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return decode_timestamp(value)


class StringListText(TypeDecorator):
    """以 JSON TEXT 存储的字符串列表（非规范化）"""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return encode_string_list(value)

    def process_result_value(self, value, dialect):
        return decode_string_list(value)


class IntEnumInteger(TypeDecorator):
    """以 INTEGER 序数存储的枚举，读出时还原为枚举成员"""

    impl = Integer
    cache_ok = True

    def __init__(self, enum_class: Type[Enum]):
        super().__init__()
        self.enum_class = enum_class

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, Enum):
            return int(value.value)
        return int(self.enum_class(value).value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return self.enum_class(int(value))
