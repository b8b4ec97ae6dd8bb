"""
领域异常定义
服务层与存储层向调用方抛出的全部错误类型
"""

from typing import Any, Optional


class RecordKeepError(Exception):
    """所有 recordkeep 错误的基类"""


class NotFound(RecordKeepError):
    """按 ID 查找的记录不存在"""

    def __init__(self, entity: str, entity_id: Any):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} with id '{entity_id}' was not found.")


class DuplicateField(RecordKeepError):
    """唯一性探测命中，写入前即被拒绝"""

    def __init__(self, field: str, value: str):
        self.field = field
        self.value = value
        super().__init__(f"A record with {field} '{value}' already exists.")


class SystemProtected(RecordKeepError):
    """试图修改或删除系统记录（is_system = True）"""

    def __init__(self, entity: str, entity_id: Optional[Any] = None):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} is a system record and cannot be modified or deleted.")


class Unauthorized(RecordKeepError):
    """凭证校验失败"""

    def __init__(self, message: str = "Invalid username or password."):
        self.message = message
        super().__init__(message)


class StorageFailure(RecordKeepError):
    """底层存储 I/O 错误的包装，原始异常保存在 __cause__ 中"""


class CodecError(RecordKeepError):
    """标量编解码失败"""

    def __init__(self, value: Any, message: str):
        self.value = value
        super().__init__(message)


class MalformedIdentifier(CodecError):
    """无法解析为 UUID 的标识符文本"""

    def __init__(self, value: Any):
        super().__init__(value, f"Malformed identifier: {value!r}")


class MalformedTimestamp(CodecError):
    """无法按 ISO-8601 解析的时间戳文本"""

    def __init__(self, value: Any):
        super().__init__(value, f"Malformed timestamp: {value!r}")
