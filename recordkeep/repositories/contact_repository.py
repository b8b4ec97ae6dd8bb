"""
联系人管理 Repository
提供 Contacts 表及其三张子表（邮箱、电话、地址）的增删改查操作
"""

import logging
import uuid
from typing import List, Optional, Type, TypeVar

from sqlalchemy import delete, update
from sqlalchemy.engine import Engine
from sqlmodel import Session, col, select

from recordkeep.db.session import open_session
from recordkeep.models.contact import (
    Contact,
    ContactAddress,
    ContactChildModel,
    ContactRecord,
    EmailAddress,
    PhoneNumber,
)

logger = logging.getLogger(__name__)

ChildT = TypeVar("ChildT", EmailAddress, PhoneNumber, ContactAddress)


class ContactRepository:
    """
    联系人数据访问对象

    读取一个联系人 = 1 次根查询 + 3 次子表查询（按 ContactUid）。
    新建联系人时根行和每条子记录各自单独提交，不包在一个事务里：
    子记录写入失败时，已提交的根行会保留下来。
    """

    def __init__(self, engine: Engine):
        """
        初始化 Repository

        Args:
            engine: 数据库引擎
        """
        self.engine = engine

    # ==================== 读取 ====================

    def get_by_id(self, contact_id: uuid.UUID) -> Optional[Contact]:
        """
        根据 ID 获取联系人（含全部子集合）

        Args:
            contact_id: 联系人 ID

        Returns:
            Contact 聚合，不存在则返回 None
        """
        with open_session(self.engine) as session:
            record = session.get(ContactRecord, contact_id)
            if record is None:
                return None
            return self._assemble(session, record)

    def get_all(self) -> List[Contact]:
        """获取所有联系人（按名称升序，大小写不敏感）"""
        with open_session(self.engine) as session:
            statement = select(ContactRecord).order_by(ContactRecord.name)
            return [self._assemble(session, record) for record in session.exec(statement).all()]

    def get_by_owner(self, owner_user_id: uuid.UUID) -> List[Contact]:
        """获取某个用户的全部联系人，排序同 get_all"""
        with open_session(self.engine) as session:
            statement = (
                select(ContactRecord)
                .where(ContactRecord.owner_user_id == owner_user_id)
                .order_by(ContactRecord.name)
            )
            return [self._assemble(session, record) for record in session.exec(statement).all()]

    def _assemble(self, session: Session, record: ContactRecord) -> Contact:
        return Contact(
            **record.model_dump(),
            email_addresses=self._children(session, EmailAddress, record.id),
            phone_numbers=self._children(session, PhoneNumber, record.id),
            addresses=self._children(session, ContactAddress, record.id),
        )

    @staticmethod
    def _children(session: Session, model: Type[ChildT], contact_id: uuid.UUID) -> List[ChildT]:
        # UUIDv7 按时间有序，CreatedAt 相同时用 Uid 保持插入顺序
        statement = (
            select(model)
            .where(model.contact_id == contact_id)
            .order_by(col(model.created_at), col(model.id))
        )
        return list(session.exec(statement).all())

    # ==================== 联系人写入 ====================

    def add(self, contact: Contact) -> Contact:
        """
        插入联系人及其子记录

        顺序：根行 -> 邮箱 -> 电话 -> 地址，每一条单独提交。
        子记录的 contact_id 会被改写为联系人的 ID。

        Args:
            contact: 已分配 ID 和时间戳的联系人聚合

        Returns:
            同一个 Contact 对象

        Raises:
            StorageFailure: 任一条插入失败（之前已提交的行不会回滚）
        """
        record = ContactRecord(**contact.model_dump(exclude={"email_addresses", "phone_numbers", "addresses"}))
        with open_session(self.engine) as session:
            session.add(record)
            session.commit()
        logger.info("Contact '%s' created (ID: %s)", contact.name, contact.id)

        for child in [*contact.email_addresses, *contact.phone_numbers, *contact.addresses]:
            child.contact_id = contact.id
            self._add_child(child)
        return contact

    def update(self, contact: Contact) -> int:
        """
        更新联系人根行的名称和标签（子集合通过各自的方法维护）

        Returns:
            受影响的行数；联系人不存在时为 0
        """
        statement = (
            update(ContactRecord)
            .where(ContactRecord.id == contact.id)
            .values({
                ContactRecord.name: contact.name,
                ContactRecord.tags: contact.tags,
                ContactRecord.updated_at: contact.updated_at,
            })
        )
        with open_session(self.engine) as session:
            rows = session.exec(statement).rowcount
            session.commit()

        if rows == 0:
            logger.warning("Update skipped for contact %s (not found)", contact.id)
        else:
            logger.info("Contact %s updated", contact.id)
        return rows

    def delete(self, contact_id: uuid.UUID) -> int:
        """删除联系人，三张子表中的记录由外键级联删除"""
        statement = delete(ContactRecord).where(ContactRecord.id == contact_id)
        with open_session(self.engine) as session:
            rows = session.exec(statement).rowcount
            session.commit()

        if rows == 0:
            logger.warning("Delete skipped for contact %s (not found)", contact_id)
        else:
            logger.info("Contact %s deleted", contact_id)
        return rows

    # ==================== 邮箱 ====================

    def add_email_address(self, email_address: EmailAddress) -> EmailAddress:
        return self._add_child(email_address)

    def update_email_address(self, email_address: EmailAddress) -> int:
        return self._update_child(email_address, {
            EmailAddress.email: email_address.email,
            EmailAddress.type: email_address.type,
            EmailAddress.is_primary: email_address.is_primary,
            EmailAddress.tags: email_address.tags,
            EmailAddress.updated_at: email_address.updated_at,
        })

    def delete_email_address(self, email_address_id: uuid.UUID) -> int:
        return self._delete_child(EmailAddress, email_address_id)

    # ==================== 电话 ====================

    def add_phone_number(self, phone_number: PhoneNumber) -> PhoneNumber:
        return self._add_child(phone_number)

    def update_phone_number(self, phone_number: PhoneNumber) -> int:
        return self._update_child(phone_number, {
            PhoneNumber.number: phone_number.number,
            PhoneNumber.type: phone_number.type,
            PhoneNumber.is_primary: phone_number.is_primary,
            PhoneNumber.tags: phone_number.tags,
            PhoneNumber.updated_at: phone_number.updated_at,
        })

    def delete_phone_number(self, phone_number_id: uuid.UUID) -> int:
        return self._delete_child(PhoneNumber, phone_number_id)

    # ==================== 地址 ====================

    def add_address(self, address: ContactAddress) -> ContactAddress:
        return self._add_child(address)

    def update_address(self, address: ContactAddress) -> int:
        return self._update_child(address, {
            ContactAddress.street: address.street,
            ContactAddress.city: address.city,
            ContactAddress.state: address.state,
            ContactAddress.postal_code: address.postal_code,
            ContactAddress.country: address.country,
            ContactAddress.type: address.type,
            ContactAddress.is_primary: address.is_primary,
            ContactAddress.tags: address.tags,
            ContactAddress.updated_at: address.updated_at,
        })

    def delete_address(self, address_id: uuid.UUID) -> int:
        return self._delete_child(ContactAddress, address_id)

    # ==================== 子表通用操作 ====================

    def _add_child(self, child: ChildT) -> ChildT:
        with open_session(self.engine) as session:
            session.add(child)
            session.commit()
        logger.info("%s %s added to contact %s", type(child).__name__, child.id, child.contact_id)
        return child

    def _update_child(self, child: ContactChildModel, values: dict) -> int:
        model = type(child)
        statement = (
            update(model)
            .where(model.id == child.id)
            .values(values)
        )
        with open_session(self.engine) as session:
            rows = session.exec(statement).rowcount
            session.commit()

        if rows == 0:
            logger.warning("Update skipped for %s %s (not found)", model.__name__, child.id)
        else:
            logger.info("%s %s updated", model.__name__, child.id)
        return rows

    def _delete_child(self, model: Type[ContactChildModel], child_id: uuid.UUID) -> int:
        statement = delete(model).where(model.id == child_id)
        with open_session(self.engine) as session:
            rows = session.exec(statement).rowcount
            session.commit()

        if rows == 0:
            logger.warning("Delete skipped for %s %s (not found)", model.__name__, child_id)
        else:
            logger.info("%s %s deleted", model.__name__, child_id)
        return rows
