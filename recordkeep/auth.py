"""
凭证哈希
AccountService 只依赖 PasswordHasher 协议，具体算法可替换
"""

from typing import Protocol

from passlib.context import CryptContext


class PasswordHasher(Protocol):
    """密码哈希器协议"""

    def hash(self, plain_password: str) -> str:
        ...

    def verify(self, plain_password: str, password_hash: str) -> bool:
        ...


class BcryptPasswordHasher:
    """基于 passlib bcrypt 的哈希器"""

    def __init__(self, rounds: int = 12):
        """
        Args:
            rounds: bcrypt 工作因子，测试中可以调低以加快速度
        """
        self.pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    def hash(self, plain_password: str) -> str:
        return self.pwd_context.hash(plain_password)

    def verify(self, plain_password: str, password_hash: str) -> bool:
        # 哈希格式无法识别时视为校验失败，而不是抛出异常
        try:
            return self.pwd_context.verify(plain_password, password_hash)
        except ValueError:
            return False
