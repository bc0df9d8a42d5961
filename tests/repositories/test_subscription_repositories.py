"""Contract tests run against both subscription store implementations."""

from typing import Optional

import pytest

from subscription_api.app.core.errors import InvalidDataError, NotFoundError
from subscription_api.app.core.month_date import MonthDate, parse
from subscription_api.app.repositories import CostQuery, SubscriptionChanges, SubscriptionDraft
from subscription_api.app.schemas.subscription import SubscriptionFilters

from conftest import OTHER_USER_ID, USER_ID


def make_draft(
    service_name: str = "Netflix",
    price: int = 999,
    user_id: str = USER_ID,
    start: str = "01-2024",
    end: Optional[str] = None,
) -> SubscriptionDraft:
    return SubscriptionDraft(
        service_name=service_name,
        price=price,
        user_id=user_id,
        start_date=parse(start),
        end_date=parse(end) if end else None,
    )


def cost(repository, start: str, end: str, **filters) -> int:
    return repository.sum_overlapping(
        CostQuery(start_date=parse(start), end_date=parse(end), **filters)
    )


class TestCreateAndGet:
    def test_create_assigns_id_and_timestamps(self, repository) -> None:
        created = repository.create(make_draft(end="06-2024"))
        assert created.id > 0
        assert created.created_at is not None
        assert created.updated_at == created.created_at
        assert created.start_date == "01-2024"
        assert created.end_date == "06-2024"

    def test_get_returns_created_record(self, repository) -> None:
        created = repository.create(make_draft())
        fetched = repository.get(created.id)
        assert fetched.id == created.id
        assert fetched.service_name == "Netflix"
        assert fetched.end_date is None

    def test_get_missing_raises_not_found(self, repository) -> None:
        with pytest.raises(NotFoundError):
            repository.get(12345)


class TestList:
    def test_empty_store_returns_empty_list(self, repository) -> None:
        assert repository.list(SubscriptionFilters()) == []
        assert repository.count(SubscriptionFilters()) == 0

    def test_newest_first_with_pagination(self, repository) -> None:
        ids = [repository.create(make_draft(service_name=f"Service {i}")).id for i in range(5)]
        page = repository.list(SubscriptionFilters(limit=2, offset=1))
        assert [row.id for row in page] == [ids[3], ids[2]]
        assert repository.count(SubscriptionFilters(limit=2, offset=1)) == 5

    def test_filters_by_user_and_service_name(self, repository) -> None:
        repository.create(make_draft(service_name="Yandex Plus"))
        repository.create(make_draft(service_name="Spotify"))
        repository.create(make_draft(service_name="yandex music", user_id=OTHER_USER_ID))

        by_name = repository.list(SubscriptionFilters(service_name="YANDEX"))
        assert {row.service_name for row in by_name} == {"Yandex Plus", "yandex music"}

        both = SubscriptionFilters(user_id=USER_ID, service_name="yandex")
        assert [row.service_name for row in repository.list(both)] == ["Yandex Plus"]
        assert repository.count(both) == 1

    def test_service_name_filter_is_literal(self, repository) -> None:
        repository.create(make_draft(service_name="Netflix"))
        assert repository.list(SubscriptionFilters(service_name="%")) == []
        assert repository.list(SubscriptionFilters(service_name="_")) == []

    def test_service_name_filter_folds_non_ascii(self, repository) -> None:
        repository.create(make_draft(service_name="Кинопоиск"))
        rows = repository.list(SubscriptionFilters(service_name="КИНО"))
        assert [row.service_name for row in rows] == ["Кинопоиск"]


class TestUpdate:
    def test_changes_only_given_fields(self, repository) -> None:
        created = repository.create(make_draft(end="06-2024"))
        updated = repository.update(created.id, SubscriptionChanges(price=1299))
        assert updated.price == 1299
        assert updated.service_name == "Netflix"
        assert updated.end_date == "06-2024"
        assert updated.updated_at >= created.updated_at

    def test_sets_and_clears_end_date(self, repository) -> None:
        created = repository.create(make_draft())
        with_end = repository.update(created.id, SubscriptionChanges(end_date=MonthDate(2024, 3)))
        assert with_end.end_date == "03-2024"
        cleared = repository.update(created.id, SubscriptionChanges(clear_end_date=True))
        assert cleared.end_date is None
        assert cost(repository, "01-2030", "02-2030") == 999

    def test_empty_changes_rejected_without_write(self, repository) -> None:
        created = repository.create(make_draft())
        with pytest.raises(InvalidDataError):
            repository.update(created.id, SubscriptionChanges())
        assert repository.get(created.id).updated_at == created.updated_at

    def test_missing_id_raises_not_found(self, repository) -> None:
        with pytest.raises(NotFoundError):
            repository.update(999, SubscriptionChanges(price=1))


class TestDelete:
    def test_delete_removes_row(self, repository) -> None:
        created = repository.create(make_draft())
        repository.delete(created.id)
        with pytest.raises(NotFoundError):
            repository.get(created.id)
        assert cost(repository, "01-2024", "12-2024") == 0

    def test_delete_missing_raises_not_found(self, repository) -> None:
        with pytest.raises(NotFoundError):
            repository.delete(42)


class TestSumOverlapping:
    def test_open_ended_matches_any_later_period(self, repository) -> None:
        repository.create(make_draft(start="01-2023", price=100))
        assert cost(repository, "01-2023", "01-2023") == 100
        assert cost(repository, "06-2030", "07-2030") == 100
        assert cost(repository, "01-2022", "12-2022") == 0

    def test_bounds_are_inclusive(self, repository) -> None:
        repository.create(make_draft(start="03-2023", end="06-2023", price=250))
        assert cost(repository, "06-2023", "07-2023") == 250
        assert cost(repository, "01-2023", "03-2023") == 250
        assert cost(repository, "07-2023", "08-2023") == 0
        assert cost(repository, "01-2023", "02-2023") == 0

    def test_orders_periods_across_years(self, repository) -> None:
        # As strings "02-2024" > "01-2025"; the sum must use calendar order.
        repository.create(make_draft(start="02-2024", end="01-2025", price=300))
        assert cost(repository, "12-2024", "12-2024") == 300
        assert cost(repository, "02-2025", "03-2025") == 0

    def test_filters_and_sums_every_row(self, repository) -> None:
        repository.create(make_draft(service_name="Netflix", price=999))
        repository.create(make_draft(service_name="Yandex Plus", price=400))
        repository.create(make_draft(service_name="Yandex Plus", price=400, user_id=OTHER_USER_ID))
        for i in range(3):
            repository.create(make_draft(service_name=f"Extra {i}", price=1))

        assert cost(repository, "01-2024", "01-2024") == 999 + 400 + 400 + 3
        assert cost(repository, "01-2024", "01-2024", user_id=USER_ID) == 999 + 400 + 3
        assert cost(repository, "01-2024", "01-2024", service_name="yandex") == 800
        assert (
            cost(repository, "01-2024", "01-2024", user_id=OTHER_USER_ID, service_name="netflix")
            == 0
        )

    def test_no_rows_sum_to_zero(self, repository) -> None:
        assert cost(repository, "01-2024", "12-2024") == 0

    def test_total_may_exceed_integer_column_range(self, repository) -> None:
        repository.create(make_draft(price=2**62))
        repository.create(make_draft(price=2**62))
        assert cost(repository, "01-2024", "01-2024") == 2**63
