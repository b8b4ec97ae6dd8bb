"""
联系人域模型 - Contacts 表及三张子表
Tags 以 JSON 文本存储在单列中，不做规范化
"""

import uuid
from enum import Enum
from typing import List

from sqlalchemy import Text, text
from sqlmodel import Field

from recordkeep.codec import IdentifierText, IntEnumInteger, StringListText

from .base import RecordModel


class EmailType(int, Enum):
    """邮箱类型"""
    PERSONAL = 0
    WORK = 1
    OTHER = 2


class PhoneType(int, Enum):
    """电话类型"""
    MOBILE = 0
    HOME = 1
    WORK = 2
    OTHER = 3


class AddressType(int, Enum):
    """地址类型"""
    HOME = 0
    WORK = 1
    OTHER = 2


class ContactChildModel(RecordModel):
    """
    联系人子记录的公共字段
    不限制数量，也不强制"最多一个 primary"，多条同时为 primary 是允许的
    """

    # 外键：所属联系人，联系人删除时级联删除
    contact_id: uuid.UUID = Field(
        foreign_key="Contacts.Uid",
        ondelete="CASCADE",
        nullable=False,
        index=True,
        sa_type=IdentifierText,
        sa_column_kwargs={"name": "ContactUid"}
    )

    is_primary: bool = Field(
        default=False,
        nullable=False,
        sa_column_kwargs={"name": "IsPrimary", "server_default": text("0")}
    )

    tags: List[str] = Field(
        default_factory=list,
        nullable=False,
        sa_type=StringListText,
        sa_column_kwargs={"name": "Tags", "server_default": "[]"}
    )


class EmailAddress(ContactChildModel, table=True):
    """联系人邮箱表"""
    __tablename__ = "ContactEmailAddresses"

    email: str = Field(nullable=False, sa_type=Text(collation="NOCASE"), sa_column_kwargs={"name": "Email"})

    type: EmailType = Field(
        default=EmailType.PERSONAL,
        nullable=False,
        sa_type=IntEnumInteger(EmailType),
        sa_column_kwargs={"name": "Type", "server_default": text("0")}
    )


class PhoneNumber(ContactChildModel, table=True):
    """联系人电话表"""
    __tablename__ = "ContactPhoneNumbers"

    number: str = Field(nullable=False, sa_type=Text, sa_column_kwargs={"name": "Number"})

    type: PhoneType = Field(
        default=PhoneType.MOBILE,
        nullable=False,
        sa_type=IntEnumInteger(PhoneType),
        sa_column_kwargs={"name": "Type", "server_default": text("0")}
    )


class ContactAddress(ContactChildModel, table=True):
    """联系人地址表"""
    __tablename__ = "ContactAddresses"

    street: str = Field(nullable=False, sa_type=Text, sa_column_kwargs={"name": "Street"})
    city: str = Field(nullable=False, sa_type=Text, sa_column_kwargs={"name": "City"})
    state: str = Field(default="", nullable=False, sa_type=Text, sa_column_kwargs={"name": "State", "server_default": ""})
    postal_code: str = Field(
        default="",
        nullable=False,
        sa_type=Text,
        sa_column_kwargs={"name": "PostalCode", "server_default": ""}
    )
    country: str = Field(nullable=False, sa_type=Text, sa_column_kwargs={"name": "Country"})

    type: AddressType = Field(
        default=AddressType.HOME,
        nullable=False,
        sa_type=IntEnumInteger(AddressType),
        sa_column_kwargs={"name": "Type", "server_default": text("0")}
    )


class ContactBase(RecordModel):
    """联系人的可存储字段"""

    # 外键：归属用户
    owner_user_id: uuid.UUID = Field(
        foreign_key="Users.Uid",
        ondelete="CASCADE",
        nullable=False,
        index=True,
        sa_type=IdentifierText,
        sa_column_kwargs={"name": "OwnerUserUid"}
    )

    name: str = Field(nullable=False, sa_type=Text(collation="NOCASE"), sa_column_kwargs={"name": "Name"})

    # 自由格式的有序标签，示例：["family", "vip"]
    tags: List[str] = Field(
        default_factory=list,
        nullable=False,
        sa_type=StringListText,
        sa_column_kwargs={"name": "Tags", "server_default": "[]"}
    )


class ContactRecord(ContactBase, table=True):
    """Contacts 表行"""
    __tablename__ = "Contacts"


class Contact(ContactBase):
    """
    联系人聚合
    子集合由三次独立查询按 ContactUid 组装
    """
    email_addresses: List[EmailAddress] = Field(default_factory=list)
    phone_numbers: List[PhoneNumber] = Field(default_factory=list)
    addresses: List[ContactAddress] = Field(default_factory=list)
