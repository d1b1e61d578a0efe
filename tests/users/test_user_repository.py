"""Tests for user CRUD and search."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError

from lessondb.enums import UserRole
from lessondb.errors import MissingArgumentError
from lessondb.users.repository import UserRepository
from lessondb.users.schemas import UserRecord


class TestInsert:
    def test_distinct_emails_both_succeed(self, users: UserRepository):
        users.insert_user(UserRecord(email="a@example.com", name="A"))
        users.insert_user(UserRecord(email="b@example.com", name="B"))
        assert len(users.list_all_users()) == 2

    def test_duplicate_email_rejected(self, users: UserRepository):
        users.insert_user(UserRecord(email="dup@example.com", name="First"))
        with pytest.raises(IntegrityError):
            users.insert_user(UserRecord(email="dup@example.com", name="Second"))
        assert len(users.list_all_users()) == 1

    def test_duplicate_email_differing_in_case_rejected(self, users: UserRepository):
        users.insert_user(UserRecord(email="case@example.com"))
        with pytest.raises(IntegrityError):
            users.insert_user(UserRecord(email="CASE@Example.com"))

    def test_duplicate_email_differing_in_non_ascii_case_rejected(self, users: UserRepository):
        users.insert_user(UserRecord(email="Ünal@example.com"))
        with pytest.raises(IntegrityError):
            users.insert_user(UserRecord(email="ünal@example.com"))

    def test_duplicate_email_rejected_even_if_first_inactive(self, users: UserRepository):
        users.insert_user(UserRecord(email="gone@example.com", is_active=False))
        with pytest.raises(IntegrityError):
            users.insert_user(UserRecord(email="gone@example.com"))

    def test_duplicate_id_rejected(self, users: UserRepository):
        first = users.insert_user(UserRecord(email="one@example.com"))
        with pytest.raises(IntegrityError):
            users.insert_user(UserRecord(id=first.id, email="two@example.com"))

    def test_none_user_fails_fast(self, users: UserRepository):
        with pytest.raises(MissingArgumentError):
            users.insert_user(None)

    def test_search_keys_derived_from_name(self, users: UserRepository):
        stored = users.insert_user(UserRecord(email="hong@example.com", name="홍길동", lower_name="stale"))
        assert stored.lower_name == "홍길동"
        assert stored.name_phonetic == "ㅎㄱㄷ"

    def test_second_superadmin_rejected(self, users: UserRepository):
        users.insert_user(UserRecord(email="root@example.com", role=UserRole.SUPERADMIN))
        with pytest.raises(IntegrityError):
            users.insert_user(UserRecord(email="root2@example.com", role=UserRole.SUPERADMIN))

    def test_repository_requires_gateway(self):
        with pytest.raises(MissingArgumentError):
            UserRepository(None)


class TestLookups:
    def test_exists_email(self, users: UserRepository, make_user):
        make_user("here@example.com")
        assert users.exists_email("here@example.com") is True
        assert users.exists_email("HERE@example.com") is True
        assert users.exists_email("missing@example.com") is False

    def test_non_ascii_email_matched_case_insensitively(self, users: UserRepository, make_user):
        stored = make_user("Ünal@example.com")
        assert users.exists_email("ünal@example.com") is True
        assert users.find_active_user_by_email(" ÜNAL@EXAMPLE.COM").id == stored.id

    @pytest.mark.parametrize("blank", [None, "", "   "])
    def test_blank_inputs_short_circuit(self, users: UserRepository, blank):
        assert users.exists_email(blank) is False
        assert users.find_active_user_by_email(blank) is None
        assert users.find_user_by_id(blank) is None

    def test_find_active_user_by_email_skips_inactive(self, users: UserRepository, make_user):
        make_user("active@example.com")
        make_user("sleeping@example.com", is_active=False)
        assert users.find_active_user_by_email("active@example.com").email == "active@example.com"
        assert users.find_active_user_by_email("sleeping@example.com") is None

    def test_find_user_by_id(self, users: UserRepository, make_user):
        user = make_user("id@example.com", name="Ida")
        found = users.find_user_by_id(user.id)
        assert found is not None
        assert found.name == "Ida"
        assert users.find_user_by_id("no-such-id") is None

    def test_has_super_admin(self, users: UserRepository, make_user):
        make_user("plain@example.com")
        assert users.has_super_admin() is False
        make_user("root@example.com", role=UserRole.SUPERADMIN)
        assert users.has_super_admin() is True


class TestUpdate:
    def test_full_replace_by_id(self, users: UserRepository, make_user):
        user = make_user("change@example.com", name="Before")
        updated = user.model_copy(update={"name": "After Name", "is_active": False})

        assert users.update_user(updated) is True

        stored = users.find_user_by_id(user.id)
        assert stored.name == "After Name"
        assert stored.lower_name == "after name"
        assert stored.is_active is False

    def test_unknown_id_returns_false(self, users: UserRepository):
        assert users.update_user(UserRecord(email="ghost@example.com")) is False

    def test_none_fails_fast(self, users: UserRepository):
        with pytest.raises(MissingArgumentError):
            users.update_user(None)


class TestFriendlySearch:
    @pytest.fixture(autouse=True)
    def _people(self, make_user):
        make_user("alice@example.com", name="Alice Kim")
        make_user("bob@sample.org", name="Bob Stone")
        make_user("hong@example.com", name="홍길동")

    def _emails(self, summaries):
        return sorted(s.email for s in summaries)

    def test_blank_query_lists_everyone(self, users: UserRepository):
        assert len(users.search_users_friendly("")) == 3
        assert len(users.search_users_friendly(None)) == 3

    def test_email_substring_case_insensitive(self, users: UserRepository):
        assert self._emails(users.search_users_friendly("SAMPLE")) == ["bob@sample.org"]

    def test_exact_case_name_substring(self, users: UserRepository):
        assert self._emails(users.search_users_friendly("Kim")) == ["alice@example.com"]

    def test_lower_name_substring(self, users: UserRepository):
        assert self._emails(users.search_users_friendly("STONE")) == ["bob@sample.org"]

    def test_phonetic_initials(self, users: UserRepository):
        assert self._emails(users.search_users_friendly("ㄱㄷ")) == ["hong@example.com"]

    def test_any_field_qualifies(self, users: UserRepository):
        assert self._emails(users.search_users_friendly("example")) == ["alice@example.com", "hong@example.com"]

    def test_no_match(self, users: UserRepository):
        assert users.search_users_friendly("zzz") == []

    def test_returns_summaries_only(self, users: UserRepository):
        summary = users.search_users_friendly("alice")[0]
        assert summary.model_dump() == {
            "email": "alice@example.com",
            "name": "Alice Kim",
            "role": UserRole.USER,
            "is_active": True,
        }


class TestListAll:
    def test_limit(self, users: UserRepository, make_user):
        for i in range(5):
            make_user(f"u{i}@example.com")
        assert len(users.list_all_users()) == 5
        assert len(users.list_all_users(limit=2)) == 2
        assert len(users.list_all_users(limit=0)) == 5


class TestRawSearch:
    def test_admin_gets_full_records_newest_first(self, users: UserRepository, make_user):
        admin = make_user("admin@example.com", role=UserRole.ADMIN)
        make_user("older@example.com", name="Older")
        make_user("newer@example.com", name="Newer")

        found = users.search_users_raw(admin.id)
        assert [u.email for u in found] == ["newer@example.com", "older@example.com", "admin@example.com"]
        assert isinstance(found[0], UserRecord)

    def test_filter_matches_email_or_name(self, users: UserRepository, make_user):
        admin = make_user("admin@example.com", role=UserRole.ADMIN)
        make_user("jane@example.com", name="Jane")
        make_user("x@example.com", name="JANET")

        found = users.search_users_raw(admin.id, "  jane ")
        assert sorted(u.email for u in found) == ["jane@example.com", "x@example.com"]

    def test_filter_folds_non_ascii_case(self, users: UserRepository, make_user):
        admin = make_user("admin@example.com", role=UserRole.ADMIN)
        make_user("emile@example.com", name="Émile")
        make_user("Øyvind@example.com", name="Oyvind")

        assert [u.email for u in users.search_users_raw(admin.id, "émile")] == ["emile@example.com"]
        assert [u.email for u in users.search_users_raw(admin.id, "øyvind")] == ["Øyvind@example.com"]

    def test_non_admin_gets_nothing(self, users: UserRepository, make_user):
        plain = make_user("plain@example.com")
        assert users.search_users_raw(plain.id) == []

    def test_missing_actor_gets_nothing(self, users: UserRepository, make_user):
        make_user("someone@example.com")
        assert users.search_users_raw("nobody") == []
        assert users.search_users_raw(None) == []
