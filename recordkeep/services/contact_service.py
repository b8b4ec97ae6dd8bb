"""
联系人服务层
负责联系人及其子记录的 ID / 时间戳分配，写入顺序和提交粒度由仓储决定
"""

import uuid
from typing import List, Optional, Sequence

from recordkeep.models.base import utc_now
from recordkeep.models.contact import (
    AddressType,
    Contact,
    ContactAddress,
    EmailAddress,
    EmailType,
    PhoneNumber,
    PhoneType,
)
from recordkeep.repositories.contact_repository import ContactRepository


class ContactService:
    """
    联系人服务类

    使用示例：
        service = ContactService(ContactRepository(engine))
        contact = service.create(
            owner_user_id=account.id,
            name="Jane Doe",
            tags=["family", "vip"],
            email_addresses=[EmailAddress(email="jane@example.com", is_primary=True)]
        )
    """

    def __init__(self, contact_repository: ContactRepository):
        self.contact_repository = contact_repository

    # ==================== 联系人 ====================

    def get(self, contact_id: uuid.UUID) -> Optional[Contact]:
        return self.contact_repository.get_by_id(contact_id)

    def get_all(self) -> List[Contact]:
        return self.contact_repository.get_all()

    def get_by_owner(self, owner_user_id: uuid.UUID) -> List[Contact]:
        return self.contact_repository.get_by_owner(owner_user_id)

    def create(
        self,
        owner_user_id: uuid.UUID,
        name: str,
        tags: Optional[Sequence[str]] = None,
        email_addresses: Optional[Sequence[EmailAddress]] = None,
        phone_numbers: Optional[Sequence[PhoneNumber]] = None,
        addresses: Optional[Sequence[ContactAddress]] = None
    ) -> Contact:
        """
        创建联系人及其子记录

        子记录统一打上与联系人相同的创建时间，contact_id 由仓储改写。
        写入不是原子的：子记录失败时，联系人根行已经提交。

        Args:
            owner_user_id: 归属用户 ID
            name: 联系人名称
            tags: 自由格式标签
            email_addresses: 邮箱列表
            phone_numbers: 电话列表
            addresses: 地址列表

        Returns:
            新创建的 Contact 聚合
        """
        now = utc_now()
        contact = Contact(
            owner_user_id=owner_user_id,
            name=name,
            tags=list(tags or []),
            email_addresses=list(email_addresses or []),
            phone_numbers=list(phone_numbers or []),
            addresses=list(addresses or []),
            created_at=now,
            updated_at=now
        )

        for child in [*contact.email_addresses, *contact.phone_numbers, *contact.addresses]:
            child.created_at = now
            child.updated_at = now
        return self.contact_repository.add(contact)

    def update(self, contact: Contact) -> bool:
        """更新联系人名称和标签，返回是否实际写入"""
        contact.updated_at = utc_now()
        return self.contact_repository.update(contact) > 0

    def delete(self, contact_id: uuid.UUID) -> bool:
        """删除联系人，子记录级联删除"""
        return self.contact_repository.delete(contact_id) > 0

    # ==================== 邮箱 ====================

    def add_email_address(
        self,
        contact_id: uuid.UUID,
        email: str,
        type: EmailType = EmailType.PERSONAL,
        is_primary: bool = False,
        tags: Optional[Sequence[str]] = None
    ) -> EmailAddress:
        now = utc_now()
        email_address = EmailAddress(
            contact_id=contact_id,
            email=email,
            type=type,
            is_primary=is_primary,
            tags=list(tags or []),
            created_at=now,
            updated_at=now
        )
        return self.contact_repository.add_email_address(email_address)

    def update_email_address(self, email_address: EmailAddress) -> bool:
        email_address.updated_at = utc_now()
        return self.contact_repository.update_email_address(email_address) > 0

    def delete_email_address(self, email_address_id: uuid.UUID) -> bool:
        return self.contact_repository.delete_email_address(email_address_id) > 0

    # ==================== 电话 ====================

    def add_phone_number(
        self,
        contact_id: uuid.UUID,
        number: str,
        type: PhoneType = PhoneType.MOBILE,
        is_primary: bool = False,
        tags: Optional[Sequence[str]] = None
    ) -> PhoneNumber:
        now = utc_now()
        phone_number = PhoneNumber(
            contact_id=contact_id,
            number=number,
            type=type,
            is_primary=is_primary,
            tags=list(tags or []),
            created_at=now,
            updated_at=now
        )
        return self.contact_repository.add_phone_number(phone_number)

    def update_phone_number(self, phone_number: PhoneNumber) -> bool:
        phone_number.updated_at = utc_now()
        return self.contact_repository.update_phone_number(phone_number) > 0

    def delete_phone_number(self, phone_number_id: uuid.UUID) -> bool:
        return self.contact_repository.delete_phone_number(phone_number_id) > 0

    # ==================== 地址 ====================

    def add_address(
        self,
        contact_id: uuid.UUID,
        street: str,
        city: str,
        country: str,
        state: str = "",
        postal_code: str = "",
        type: AddressType = AddressType.HOME,
        is_primary: bool = False,
        tags: Optional[Sequence[str]] = None
    ) -> ContactAddress:
        now = utc_now()
        address = ContactAddress(
            contact_id=contact_id,
            street=street,
            city=city,
            state=state,
            postal_code=postal_code,
            country=country,
            type=type,
            is_primary=is_primary,
            tags=list(tags or []),
            created_at=now,
            updated_at=now
        )
        return self.contact_repository.add_address(address)

    def update_address(self, address: ContactAddress) -> bool:
        address.updated_at = utc_now()
        return self.contact_repository.update_address(address) > 0

    def delete_address(self, address_id: uuid.UUID) -> bool:
        return self.contact_repository.delete_address(address_id) > 0
