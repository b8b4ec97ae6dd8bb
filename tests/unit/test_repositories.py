"""
Repository 单元测试
验证 AccountRepository、LabelRepository、MemoRepository 和 ContactRepository 的 CRUD 操作
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy import func, text
from sqlalchemy.exc import IntegrityError
from sqlmodel import select

from recordkeep.db.session import open_session
from recordkeep.exceptions import MalformedIdentifier, MalformedTimestamp, StorageFailure
from recordkeep.models import (
    Account,
    AddressType,
    Contact,
    ContactAddress,
    EmailAddress,
    EmailType,
    Label,
    Memo,
    MemoLabel,
    PhoneNumber,
    PhoneType,
    UserRole,
    new_id,
)


def _count_memo_labels(engine, memo_id) -> int:
    with open_session(engine) as session:
        statement = select(func.count()).select_from(MemoLabel).where(MemoLabel.memo_id == memo_id)
        return session.exec(statement).one()


class TestAccountRepository:
    """测试 AccountRepository"""

    def test_add_and_get_round_trip(self, account_repository):
        """测试写入后按 ID 读取得到相同的字段值"""
        account = Account(
            username="dave",
            password_hash="hash",
            email="dave@example.com",
            first_name="Dave",
            date_of_birth=datetime(1990, 5, 17, tzinfo=timezone.utc),
            role=UserRole.PRIVILEGED
        )
        account_repository.add(account)

        stored = account_repository.get_by_id(account.id)

        assert stored is not None
        assert stored.model_dump() == account.model_dump()
        assert stored.role is UserRole.PRIVILEGED

    def test_get_missing_returns_none(self, account_repository):
        """测试不存在的 ID 返回 None"""
        assert account_repository.get_by_id(new_id()) is None

    def test_username_and_email_probes_are_case_insensitive(self, account_repository, test_account):
        """测试用户名和邮箱探测大小写不敏感"""
        assert account_repository.username_exists("ALICE") is True
        assert account_repository.email_exists("Alice@Example.COM") is True
        assert account_repository.username_exists("alicia") is False
        assert account_repository.get_by_username("Alice").id == test_account.id
        assert account_repository.get_by_email("ALICE@EXAMPLE.COM").id == test_account.id

    def test_get_all_ordered_by_username(self, account_repository):
        """测试按用户名升序（大小写不敏感）"""
        for username in ("zed", "Bob", "amy"):
            account_repository.add(Account(username=username, password_hash="h", email=f"{username}@example.com"))

        usernames = [account.username for account in account_repository.get_all()]

        assert usernames == ["amy", "Bob", "zed"]

    def test_update(self, account_repository, test_account):
        """测试更新可变字段"""
        test_account.bio = "Hello"
        test_account.is_active = False

        rows = account_repository.update(test_account)

        assert rows == 1
        stored = account_repository.get_by_id(test_account.id)
        assert stored.bio == "Hello"
        assert stored.is_active is False

    def test_update_never_writes_is_system(self, account_repository, test_account):
        """测试更新路径不会修改 IsSystem"""
        test_account.is_system = True

        account_repository.update(test_account)

        assert account_repository.get_by_id(test_account.id).is_system is False

    def test_update_system_account_is_noop(self, account_repository, system_account):
        """测试系统账户更新命中 0 行，记录保持不变"""
        before = account_repository.get_by_id(system_account.id).model_dump()
        changed = Account(**before)
        changed.username = "hijacked"
        changed.email = "evil@example.com"

        rows = account_repository.update(changed)

        assert rows == 0
        assert account_repository.get_by_id(system_account.id).model_dump() == before

    def test_delete_system_account_is_noop(self, account_repository, system_account):
        """测试系统账户删除命中 0 行"""
        assert account_repository.delete(system_account.id) == 0
        assert account_repository.get_by_id(system_account.id) is not None

    def test_delete_missing_is_noop(self, account_repository):
        """测试删除不存在的账户不报错"""
        assert account_repository.delete(new_id()) == 0

    def test_delete_cascades_to_owned_records(self, account_repository, test_account, memo_service,
                                              contact_service, label_service):
        """测试删除账户时级联删除标签、备忘和联系人"""
        memo_service.create(test_account.id, "note")
        contact_service.create(test_account.id, "Jane Doe")

        assert account_repository.delete(test_account.id) == 1

        assert label_service.get_by_user(test_account.id) == []
        assert memo_service.get_by_user(test_account.id) == []
        assert contact_service.get_by_owner(test_account.id) == []

    def test_unique_violation_is_wrapped(self, account_repository, test_account):
        """测试绕过探测直接插入重复用户名时，约束错误被包装为 StorageFailure"""
        duplicate = Account(username="ALICE", password_hash="h", email="other@example.com")

        with pytest.raises(StorageFailure) as exc_info:
            account_repository.add(duplicate)

        assert isinstance(exc_info.value.__cause__, IntegrityError)

    def test_malformed_stored_identifier_raises(self, test_db_engine, account_repository):
        """测试库中非法的 UUID 文本在读取时抛出 MalformedIdentifier"""
        with test_db_engine.begin() as connection:
            connection.execute(text(
                "INSERT INTO Users (Uid, Username, PasswordHash, Email, Role, IsActive, IsSystem, CreatedAt, UpdatedAt) "
                "VALUES ('garbage', 'ghost', 'h', 'ghost@example.com', 0, 1, 0, "
                "'2024-01-01T00:00:00.000000+00:00', '2024-01-01T00:00:00.000000+00:00')"
            ))

        with pytest.raises(MalformedIdentifier):
            account_repository.get_all()

    def test_malformed_stored_timestamp_raises(self, test_db_engine, account_repository):
        """测试库中非法的时间戳文本在读取时抛出 MalformedTimestamp"""
        with test_db_engine.begin() as connection:
            connection.execute(text(
                "INSERT INTO Users (Uid, Username, PasswordHash, Email, Role, IsActive, IsSystem, CreatedAt, UpdatedAt) "
                f"VALUES ('{new_id()}', 'ghost', 'h', 'ghost@example.com', 0, 1, 0, 'not a date', 'not a date')"
            ))

        with pytest.raises(MalformedTimestamp):
            account_repository.get_all()


class TestLabelRepository:
    """测试 LabelRepository"""

    def test_add_and_get_round_trip(self, label_repository, test_account):
        """测试写入后按 ID 读取得到相同的字段值"""
        label = Label(user_id=test_account.id, name="Travel", description="Trips", color="#00AAFF")
        label_repository.add(label)

        stored = label_repository.get_by_id(label.id)

        assert stored.model_dump() == label.model_dump()

    def test_get_by_user_ordered_by_name(self, label_repository, test_account):
        """测试按名称升序返回用户的标签"""
        names = [label.name for label in label_repository.get_by_user(test_account.id)]

        assert names == sorted(names, key=str.lower)
        assert len(names) == 10

    def test_get_by_name_case_insensitive(self, label_repository, test_label):
        """测试按名称查找大小写不敏感"""
        found = label_repository.get_by_name(test_label.user_id, "READING")

        assert found is not None
        assert found.id == test_label.id

    def test_duplicate_names_are_allowed(self, label_repository, test_account):
        """测试同名标签不会被存储层拒绝"""
        label_repository.add(Label(user_id=test_account.id, name="Work"))

        work_labels = [label for label in label_repository.get_by_user(test_account.id) if label.name == "Work"]

        assert len(work_labels) == 2

    def test_update_and_delete(self, label_repository, test_label):
        """测试更新和删除用户自建标签"""
        test_label.color = "#000000"

        assert label_repository.update(test_label) == 1
        assert label_repository.get_by_id(test_label.id).color == "#000000"
        assert label_repository.delete(test_label.id) == 1
        assert label_repository.get_by_id(test_label.id) is None

    def test_seeded_label_can_be_renamed_and_deleted(self, label_repository, memo_repository, test_account):
        """测试默认标签可以改名和删除，删除后从备忘的标签列表中消失"""
        work = label_repository.get_by_name(test_account.id, "Work")
        memo = memo_repository.add(Memo(user_id=test_account.id, content="standup"))
        memo_repository.add_label(memo.id, work.id)
        work.name = "Job"

        assert label_repository.update(work) == 1
        assert label_repository.get_by_id(work.id).name == "Job"
        assert label_repository.delete(work.id) == 1
        assert label_repository.get_by_id(work.id) is None
        assert memo_repository.get_by_id(memo.id).labels == []

    def test_update_and_delete_missing_label(self, label_repository, test_account):
        """测试不存在的标签更新和删除命中 0 行"""
        ghost = Label(user_id=test_account.id, name="Ghost")

        assert label_repository.update(ghost) == 0
        assert label_repository.delete(ghost.id) == 0


class TestMemoRepository:
    """测试 MemoRepository"""

    def test_add_and_get_round_trip(self, memo_repository, test_account):
        """测试写入后读取得到相同的字段值"""
        memo = Memo(user_id=test_account.id, title="Groceries", content="Milk, eggs")
        memo_repository.add(memo)

        stored = memo_repository.get_by_id(memo.id)

        assert stored.model_dump() == memo.model_dump()

    def test_labels_are_ordered_by_name(self, memo_repository, label_service, test_account):
        """测试备忘的标签按名称升序组装"""
        memo = memo_repository.add(Memo(user_id=test_account.id, content="x"))
        for name in ("Work", "Archive", "Personal"):
            memo_repository.add_label(memo.id, label_service.get_by_name(test_account.id, name).id)

        names = [label.name for label in memo_repository.get_by_id(memo.id).labels]

        assert names == ["Archive", "Personal", "Work"]

    def test_add_label_is_idempotent(self, test_db_engine, memo_repository, test_account, test_label):
        """测试重复挂同一标签只产生一条关联"""
        memo = memo_repository.add(Memo(user_id=test_account.id, content="x"))

        memo_repository.add_label(memo.id, test_label.id)
        memo_repository.add_label(memo.id, test_label.id)

        assert _count_memo_labels(test_db_engine, memo.id) == 1
        assert [label.id for label in memo_repository.get_by_id(memo.id).labels] == [test_label.id]

    def test_remove_absent_label_is_noop(self, memo_repository, test_account, test_label):
        """测试摘除未挂上的标签不报错"""
        memo = memo_repository.add(Memo(user_id=test_account.id, content="x"))

        memo_repository.remove_label(memo.id, test_label.id)

        assert memo_repository.get_by_id(memo.id).labels == []

    def test_remove_label(self, test_db_engine, memo_repository, test_account, test_label):
        """测试摘除标签"""
        memo = memo_repository.add(Memo(user_id=test_account.id, content="x"))
        memo_repository.add_label(memo.id, test_label.id)

        memo_repository.remove_label(memo.id, test_label.id)

        assert _count_memo_labels(test_db_engine, memo.id) == 0

    def test_label_delete_cascades_to_memos(self, memo_repository, label_repository, test_account, test_label):
        """测试删除标签后，所有备忘的标签列表中都不再出现它"""
        first = memo_repository.add(Memo(user_id=test_account.id, content="one"))
        second = memo_repository.add(Memo(user_id=test_account.id, content="two"))
        memo_repository.add_label(first.id, test_label.id)
        memo_repository.add_label(second.id, test_label.id)

        label_repository.delete(test_label.id)

        for memo in memo_repository.get_by_user(test_account.id):
            assert test_label.id not in [label.id for label in memo.labels]

    def test_memo_delete_cascades_associations(self, test_db_engine, memo_repository, test_account, test_label):
        """测试删除备忘时关联行一并删除"""
        memo = memo_repository.add(Memo(user_id=test_account.id, content="x"))
        memo_repository.add_label(memo.id, test_label.id)

        assert memo_repository.delete(memo.id) == 1
        assert _count_memo_labels(test_db_engine, memo.id) == 0

    def test_get_all_ordered_by_updated_at_desc(self, memo_repository, test_account):
        """测试按最近修改时间降序"""
        old = Memo(user_id=test_account.id, content="old", updated_at=datetime(2024, 1, 1, tzinfo=timezone.utc))
        new = Memo(user_id=test_account.id, content="new", updated_at=datetime(2024, 6, 1, tzinfo=timezone.utc))
        memo_repository.add(old)
        memo_repository.add(new)

        assert [memo.content for memo in memo_repository.get_all()] == ["new", "old"]

    def test_update(self, memo_repository, test_account):
        """测试更新标题和正文"""
        memo = memo_repository.add(Memo(user_id=test_account.id, content="draft"))
        memo.title = "Final"
        memo.content = "done"

        assert memo_repository.update(memo) == 1
        stored = memo_repository.get_by_id(memo.id)
        assert (stored.title, stored.content) == ("Final", "done")


class TestContactRepository:
    """测试 ContactRepository"""

    def test_jane_doe_round_trip(self, contact_repository, test_account):
        """测试联系人及全部子集合完整写入并读回"""
        contact = Contact(
            owner_user_id=test_account.id,
            name="Jane Doe",
            tags=["family", "vip"],
            email_addresses=[
                EmailAddress(email="jane@home.example", type=EmailType.PERSONAL, is_primary=True),
                EmailAddress(email="jane@work.example", type=EmailType.WORK, tags=["office"]),
            ],
            phone_numbers=[PhoneNumber(number="+1 555 0100", type=PhoneType.MOBILE, is_primary=True)],
            addresses=[ContactAddress(street="1 Main St", city="Springfield", country="US", type=AddressType.HOME)]
        )
        contact_repository.add(contact)

        stored = contact_repository.get_by_id(contact.id)

        assert stored.tags == ["family", "vip"]
        assert [email.email for email in stored.email_addresses] == ["jane@home.example", "jane@work.example"]
        assert stored.email_addresses[1].tags == ["office"]
        assert stored.phone_numbers[0].type is PhoneType.MOBILE
        assert stored.addresses[0].city == "Springfield"
        assert all(child.contact_id == contact.id for child in stored.email_addresses)
        assert stored.model_dump() == contact.model_dump()

    def test_delete_cascades_to_children(self, test_db_engine, contact_repository, test_account):
        """测试删除联系人时三张子表的记录一并删除"""
        contact = contact_repository.add(Contact(
            owner_user_id=test_account.id,
            name="Jane Doe",
            email_addresses=[EmailAddress(email="jane@example.com")],
            phone_numbers=[PhoneNumber(number="123")],
            addresses=[ContactAddress(street="s", city="c", country="US")]
        ))

        assert contact_repository.delete(contact.id) == 1

        with open_session(test_db_engine) as session:
            for model in (EmailAddress, PhoneNumber, ContactAddress):
                assert session.exec(select(model).where(model.contact_id == contact.id)).all() == []

    def test_failed_child_insert_keeps_parent(self, contact_repository, test_account):
        """测试子记录写入失败时，已提交的联系人根行和前面的子记录仍然存在"""
        duplicate_id = new_id()
        contact = Contact(
            owner_user_id=test_account.id,
            name="Half Written",
            email_addresses=[
                EmailAddress(id=duplicate_id, email="first@example.com"),
                EmailAddress(id=duplicate_id, email="second@example.com"),
            ],
            phone_numbers=[PhoneNumber(number="never written")]
        )

        with pytest.raises(StorageFailure):
            contact_repository.add(contact)

        stored = contact_repository.get_by_id(contact.id)
        assert stored is not None
        assert [email.email for email in stored.email_addresses] == ["first@example.com"]
        assert stored.phone_numbers == []

    def test_get_by_owner_ordered_by_name(self, contact_repository, test_account):
        """测试按名称升序（大小写不敏感）"""
        for name in ("zoe", "Adam", "mike"):
            contact_repository.add(Contact(owner_user_id=test_account.id, name=name))

        names = [contact.name for contact in contact_repository.get_by_owner(test_account.id)]

        assert names == ["Adam", "mike", "zoe"]

    def test_update_root_and_tags(self, contact_repository, test_account):
        """测试更新名称和标签，标签顺序和重复元素保持不变"""
        contact = contact_repository.add(Contact(owner_user_id=test_account.id, name="Jane"))
        contact.name = "Jane Doe"
        contact.tags = ["b", "a", "b"]

        assert contact_repository.update(contact) == 1
        stored = contact_repository.get_by_id(contact.id)
        assert stored.name == "Jane Doe"
        assert stored.tags == ["b", "a", "b"]

    def test_child_update_and_delete(self, contact_repository, test_account):
        """测试子记录的更新和删除"""
        contact = contact_repository.add(Contact(owner_user_id=test_account.id, name="Jane"))
        phone = contact_repository.add_phone_number(PhoneNumber(contact_id=contact.id, number="111"))
        phone.number = "222"
        phone.type = PhoneType.WORK

        assert contact_repository.update_phone_number(phone) == 1
        stored = contact_repository.get_by_id(contact.id).phone_numbers[0]
        assert (stored.number, stored.type) == ("222", PhoneType.WORK)

        assert contact_repository.delete_phone_number(phone.id) == 1
        assert contact_repository.get_by_id(contact.id).phone_numbers == []

    def test_child_for_missing_contact_is_rejected(self, contact_repository):
        """测试外键约束拒绝指向不存在联系人的子记录"""
        with pytest.raises(StorageFailure):
            contact_repository.add_email_address(EmailAddress(contact_id=new_id(), email="orphan@example.com"))
