"""
Unit tests for the listing and account services (no HTTP layer).

Run: pytest property_api/test_listing_service.py -v
"""

import pytest

from property_api import accounts, listings, store
from property_api.db import fetch_one, get_db_connection
from property_api.errors import AuthenticationError, ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from property_api.models import Account, UserRole
from property_api.store import ListingFilters, build_listing_where


@pytest.fixture
def agent(database):
    return accounts.register("John Agent", "agent@test.com", "password123", "agent")


@pytest.fixture
def other_agent(database):
    return accounts.register("Other Agent", "other@test.com", "password123", "agent")


def _raw_row(listing_id):
    with get_db_connection() as conn:
        return fetch_one(conn, "SELECT * FROM listings WHERE id = :id", {"id": listing_id})


class TestAccounts:

    def test_register_hashes_password(self, agent):
        assert agent.password_hash != "password123"
        assert agent.password_hash.startswith("$pbkdf2-sha256$")

    def test_register_duplicate_email(self, agent):
        with pytest.raises(ConflictError):
            accounts.register("Again", "agent@test.com", "password123", "admin")

    def test_unique_email_constraint_raises_conflict(self, agent):
        # Skips the pre-check, as a concurrent registration would
        duplicate = Account(
            id="another-id",
            name="Racer",
            email="agent@test.com",
            password_hash="x",
            role=UserRole.admin,
        )
        with pytest.raises(ConflictError, match="Email already registered"):
            with get_db_connection() as conn:
                store.insert_account(conn, duplicate)

        with get_db_connection() as conn:
            assert store.get_account_by_email(conn, "agent@test.com").id == agent.id

    @pytest.mark.parametrize("role", ["owner", "AGENT", ""])
    def test_register_invalid_role(self, database, role):
        with pytest.raises(ValidationError):
            accounts.register("X", "x@test.com", "password123", role)

    def test_login_success(self, agent):
        token, account = accounts.login("agent@test.com", "password123")
        assert token
        assert account.id == agent.id

    def test_login_failures_share_one_message(self, agent):
        with pytest.raises(AuthenticationError) as wrong_password:
            accounts.login("agent@test.com", "nope")
        with pytest.raises(AuthenticationError) as unknown_email:
            accounts.login("ghost@test.com", "password123")
        assert str(wrong_password.value) == str(unknown_email.value)


class TestCreate:

    def test_defaults(self, agent):
        listing = listings.create(agent.id, "X", 500000, "Miami")
        assert listing.status.value == "available"
        assert listing.created_by == agent.id
        assert listing.description is None
        assert _raw_row(listing.id)["is_deleted"] == 0

    def test_zero_price_is_allowed(self, agent):
        listing = listings.create(agent.id, "Free house", 0, "Nowhere")
        assert listing.price == 0

    @pytest.mark.parametrize("title,price,location", [
        (None, 1, "Miami"),
        ("X", None, "Miami"),
        ("X", 1, ""),
        ("  ", 1, "Miami"),
    ])
    def test_required_fields(self, agent, title, price, location):
        with pytest.raises(ValidationError, match="Title, price, and location are required"):
            listings.create(agent.id, title, price, location)

    @pytest.mark.parametrize("price", [float("inf"), float("-inf"), float("nan"), 10**400, True])
    def test_price_must_be_finite_number(self, agent, price):
        with pytest.raises(ValidationError, match="Price must be a number"):
            listings.create(agent.id, "X", price, "Miami")

    def test_invalid_status(self, agent):
        with pytest.raises(ValidationError):
            listings.create(agent.id, "X", 1, "Miami", status="pending")


class TestUpdateAndDelete:

    def test_partial_update(self, agent):
        listing = listings.create(agent.id, "X", 500000, "Miami", description="Nice")

        updated = listings.update(agent.id, listing.id, {"price": 550000, "title": None})

        assert updated.price == 550000
        assert updated.title == "X"
        assert updated.description == "Nice"
        assert updated.updated_at >= listing.updated_at

    def test_update_rejects_non_finite_price(self, agent):
        listing = listings.create(agent.id, "X", 500000, "Miami")
        with pytest.raises(ValidationError):
            listings.update(agent.id, listing.id, {"price": float("nan")})
        assert listings.get(listing.id).price == 500000

    def test_update_by_non_owner(self, agent, other_agent):
        listing = listings.create(agent.id, "X", 500000, "Miami")

        with pytest.raises(PermissionDeniedError):
            listings.update(other_agent.id, listing.id, {"price": 1})
        assert listings.get(listing.id).price == 500000

    def test_update_rejects_unknown_fields(self, agent):
        listing = listings.create(agent.id, "X", 500000, "Miami")
        with pytest.raises(ValidationError):
            listings.update(agent.id, listing.id, {"created_by": "someone"})

    def test_soft_delete_keeps_row(self, agent):
        listing = listings.create(agent.id, "X", 500000, "Miami")

        listings.delete(agent.id, listing.id)

        with pytest.raises(NotFoundError):
            listings.get(listing.id)
        assert _raw_row(listing.id)["is_deleted"] == 1

    def test_delete_by_non_owner(self, agent, other_agent):
        listing = listings.create(agent.id, "X", 500000, "Miami")
        with pytest.raises(PermissionDeniedError):
            listings.delete(other_agent.id, listing.id)
        assert listings.get(listing.id).id == listing.id

    def test_admin_delete_ignores_ownership(self, agent):
        listing = listings.create(agent.id, "X", 500000, "Miami")

        listings.admin_delete(listing.id)

        assert _raw_row(listing.id)["is_deleted"] == 1
        with pytest.raises(NotFoundError):
            listings.admin_delete(listing.id)

    def test_deleted_listing_cannot_be_updated(self, agent):
        listing = listings.create(agent.id, "X", 500000, "Miami")
        listings.delete(agent.id, listing.id)
        with pytest.raises(NotFoundError):
            listings.update(agent.id, listing.id, {"price": 1})


class TestListQuery:

    def test_excludes_deleted(self, agent):
        keep = listings.create(agent.id, "Keep", 1, "Miami")
        gone = listings.create(agent.id, "Gone", 1, "Miami")
        listings.delete(agent.id, gone.id)

        results, pagination = listings.list_listings()
        assert [listing.id for listing in results] == [keep.id]
        assert pagination["total"] == 1

    def test_pages(self, agent):
        for i in range(12):
            listings.create(agent.id, f"House {i}", 1000 * i, "Miami")

        results, pagination = listings.list_listings(page=1, limit=5)
        assert len(results) == 5
        assert pagination == {"total": 12, "page": 1, "limit": 5, "pages": 3}

        results, _ = listings.list_listings(page=4, limit=5)
        assert results == []

    def test_empty_result_has_zero_pages(self, database):
        results, pagination = listings.list_listings()
        assert results == []
        assert pagination["pages"] == 0

    def test_search_matches_wildcards_literally(self, agent):
        listings.create(agent.id, "100% Ocean View", 1, "Miami")
        listings.create(agent.id, "Ocean View", 1, "Miami")
        listings.create(agent.id, "snake_case Cottage", 1, "Austin")
        listings.create(agent.id, "Snakes Cottage", 1, "Austin")

        results, _ = listings.list_listings(ListingFilters(search="%"))
        assert [listing.title for listing in results] == ["100% Ocean View"]

        results, _ = listings.list_listings(ListingFilters(search="e_c"))
        assert [listing.title for listing in results] == ["snake_case Cottage"]

    def test_owner_summary_is_populated(self, agent):
        listings.create(agent.id, "X", 1, "Miami")
        results, _ = listings.list_listings()
        assert results[0].owner.email == "agent@test.com"
        assert results[0].owner.name == "John Agent"

    def test_limit_above_cap(self, database):
        with pytest.raises(ValidationError):
            listings.list_listings(limit=10_000)

    def test_page_offset_beyond_64_bits(self, database):
        with pytest.raises(ValidationError, match="page is out of range"):
            listings.list_listings(page=10**19, limit=10)

    def test_largest_valid_offset(self, agent):
        listings.create(agent.id, "X", 1, "Miami")
        results, pagination = listings.list_listings(page=2**63, limit=1)
        assert results == []
        assert pagination["total"] == 1


def test_where_clause_combines_filters_with_and():
    where, params = build_listing_where(
        ListingFilters(status="available", min_price=100, max_price=600, search="Beach")
    )
    assert where.startswith("l.is_deleted = 0 AND ")
    assert where.count(" AND ") == 4
    assert " OR " in where
    assert params == {"status": "available", "min_price": 100, "max_price": 600, "search": "%beach%"}


def test_where_clause_without_filters_only_hides_deleted():
    where, params = build_listing_where(ListingFilters())
    assert where == "l.is_deleted = 0"
    assert params == {}
