"""
Tests for the inventory ledger: upsert, addition mode and listing
"""
from datetime import date, timedelta

import pytest
from django.db import IntegrityError
from django.utils import timezone

from core.exceptions import NotFoundError, ValidationError
from inventory.models import InventoryRecord
from inventory.utils import get_record, list_records, upsert_entries

DAY = "2025-10-26"


@pytest.mark.django_db
class TestUpsert:
    """Create-or-update keyed by (product, date)"""

    def test_first_write_creates_record(self, make_product):
        product = make_product("Croissant")

        report = upsert_entries([
            {"productId": product.pk, "date": DAY, "remaining": 5, "produced": 20},
        ])

        assert report.failed == []
        record = InventoryRecord.objects.get(product=product, date=date(2025, 10, 26))
        assert (record.remaining, record.produced, record.planned) == (5, 20, None)
        assert report.outcomes[0].created is True
        assert report.succeeded[0].product.name == "Croissant"

    def test_second_write_overwrites(self, make_product):
        """Without addition mode the second payload wins, it is not summed"""
        product = make_product("Croissant")
        entry = {"productId": product.pk, "date": DAY, "remaining": 5, "produced": 20}

        upsert_entries([entry])
        report = upsert_entries([dict(entry, remaining=7, produced=12)])

        record = InventoryRecord.objects.get(product=product)
        assert (record.remaining, record.produced) == (7, 12)
        assert report.outcomes[0].created is False
        assert InventoryRecord.objects.count() == 1

    def test_identical_writes_keep_payload_values(self, make_product):
        product = make_product("Croissant")
        entry = {"productId": product.pk, "date": DAY, "remaining": 5, "produced": 20}

        upsert_entries([entry])
        upsert_entries([entry])

        record = InventoryRecord.objects.get(product=product)
        assert (record.remaining, record.produced) == (5, 20)

    def test_addition_mode_accumulates_produced(self, make_product):
        """produced 5 then 3 in addition mode -> 8"""
        product = make_product("Baguette")

        upsert_entries([{"productId": product.pk, "date": DAY, "produced": 5, "additionMode": True}])
        report = upsert_entries([{"productId": product.pk, "date": DAY, "produced": 3, "additionMode": True}])

        assert InventoryRecord.objects.get(product=product).produced == 8
        assert report.succeeded[0].produced == 8

    def test_addition_mode_on_record_without_produced(self, make_product):
        product = make_product("Baguette")
        upsert_entries([{"productId": product.pk, "date": DAY, "remaining": 4}])

        upsert_entries([{"productId": product.pk, "date": DAY, "produced": 6, "additionMode": True}])

        record = InventoryRecord.objects.get(product=product)
        assert (record.remaining, record.produced) == (4, 6)

    def test_addition_mode_only_touches_produced(self, make_product):
        product = make_product("Baguette")
        upsert_entries([{"productId": product.pk, "date": DAY, "remaining": 2, "produced": 10, "planned": 12}])

        upsert_entries([{"productId": product.pk, "date": DAY, "remaining": 1, "produced": 4, "additionMode": True}])

        record = InventoryRecord.objects.get(product=product)
        assert (record.remaining, record.produced, record.planned) == (1, 14, 12)

    def test_partial_update_keeps_other_fields(self, make_product):
        product = make_product("Tarte")
        upsert_entries([{"productId": product.pk, "date": DAY, "remaining": 3, "produced": 9, "planned": 10}])

        upsert_entries([{"productId": product.pk, "date": DAY, "remaining": 1}])

        record = InventoryRecord.objects.get(product=product)
        assert (record.remaining, record.produced, record.planned) == (1, 9, 10)

    def test_forecast_only_entry_defaults_remaining(self, make_product):
        product = make_product("Tarte")
        tomorrow = (timezone.localdate() + timedelta(days=1)).isoformat()

        upsert_entries([{"productId": product.pk, "date": tomorrow, "planned": 15}])

        record = InventoryRecord.objects.get(product=product)
        assert (record.remaining, record.produced, record.planned) == (0, None, 15)

    def test_null_fields_are_not_supplied(self, make_product):
        product = make_product("Tarte")
        upsert_entries([{"productId": product.pk, "date": DAY, "remaining": 3, "produced": 9}])

        upsert_entries([{"productId": product.pk, "date": DAY, "remaining": 2, "produced": None}])

        assert InventoryRecord.objects.get(product=product).produced == 9

    def test_date_defaults_to_today(self, make_product):
        product = make_product("Pain")
        upsert_entries([{"productId": product.pk, "remaining": 1}])

        assert InventoryRecord.objects.get(product=product).date == timezone.localdate()

    def test_time_of_day_is_discarded(self, make_product):
        product = make_product("Pain")
        upsert_entries([{"productId": product.pk, "date": "2025-10-26T18:45:00.000Z", "remaining": 1}])
        upsert_entries([{"productId": product.pk, "date": "2025-10-26", "remaining": 2}])

        record = InventoryRecord.objects.get(product=product)
        assert record.date == date(2025, 10, 26)
        assert record.remaining == 2

    def test_unpadded_date_with_time(self, make_product):
        product = make_product("Pain")
        report = upsert_entries([{"productId": product.pk, "date": "2025-1-5T08:00", "remaining": 1}])

        assert report.failed == []
        assert InventoryRecord.objects.get(product=product).date == date(2025, 1, 5)

    def test_string_quantities_are_accepted(self, make_product):
        product = make_product("Pain")
        upsert_entries([{"productId": str(product.pk), "date": DAY, "remaining": "4", "produced": "10"}])

        record = InventoryRecord.objects.get(product=product)
        assert (record.remaining, record.produced) == (4, 10)


@pytest.mark.django_db
class TestUpsertFailures:
    """One bad entry never blocks the others"""

    def test_negative_quantity_is_a_soft_failure(self, make_product):
        good = make_product("Croissant")
        bad = make_product("Baguette")

        report = upsert_entries([
            {"productId": bad.pk, "date": DAY, "remaining": -1},
            {"productId": good.pk, "date": DAY, "remaining": 2, "produced": 10},
            {"productId": bad.pk, "date": DAY, "remaining": 1, "planned": -5},
        ])

        assert len(report.succeeded) == 1
        assert len(report.failed) == 2
        assert all("négatives" in reason for reason in report.failed)
        assert list(InventoryRecord.objects.values_list("product_id", flat=True)) == [good.pk]

    def test_unknown_product(self, make_product):
        product = make_product("Croissant")

        report = upsert_entries([
            {"productId": 424242, "date": DAY, "remaining": 1},
            {"productId": product.pk, "date": DAY, "remaining": 1},
        ])

        assert report.failed == ["Produit avec l'ID 424242 introuvable."]
        assert [r.product_id for r in report.succeeded] == [product.pk]

    @pytest.mark.parametrize("entry", [
        {"remaining": 1},
        {"productId": "", "remaining": 1},
        {"productId": "abc", "remaining": 1},
        "not an object",
    ])
    def test_malformed_entries(self, make_product, entry):
        report = upsert_entries([entry])

        assert report.succeeded == []
        assert len(report.failed) == 1
        assert not report.outcomes[0].ok

    def test_entry_without_quantities(self, make_product):
        product = make_product("Croissant")
        report = upsert_entries([{"productId": product.pk, "date": DAY}])

        assert len(report.failed) == 1
        assert InventoryRecord.objects.count() == 0

    def test_fractional_quantity(self, make_product):
        product = make_product("Croissant")
        report = upsert_entries([{"productId": product.pk, "date": DAY, "remaining": 2.5}])

        assert len(report.failed) == 1

    def test_bad_date(self, make_product):
        product = make_product("Croissant")
        report = upsert_entries([{"productId": product.pk, "date": "26/10/2025", "remaining": 2}])

        assert len(report.failed) == 1
        assert "date" in report.failed[0]

    def test_oversized_quantity_is_a_soft_failure(self, make_product):
        good = make_product("Croissant")
        bad = make_product("Baguette")

        report = upsert_entries([
            {"productId": good.pk, "date": DAY, "remaining": 3},
            {"productId": bad.pk, "date": DAY, "remaining": 10 ** 20},
        ])

        assert len(report.succeeded) == 1
        assert len(report.failed) == 1
        assert "valeur maximale" in report.failed[0]
        assert list(InventoryRecord.objects.values_list("product_id", flat=True)) == [good.pk]

    def test_largest_storable_quantity(self, make_product):
        product = make_product("Croissant")
        report = upsert_entries([{"productId": product.pk, "date": DAY, "produced": 2147483647}])

        assert report.failed == []
        assert InventoryRecord.objects.get(product=product).produced == 2147483647

    def test_out_of_range_product_id(self, make_product):
        product = make_product("Croissant")

        report = upsert_entries([
            {"productId": 10 ** 20, "date": DAY, "remaining": 1},
            {"productId": product.pk, "date": DAY, "remaining": 1},
        ])

        assert report.failed == [f"Produit avec l'ID {10 ** 20} introuvable."]
        assert [r.product_id for r in report.succeeded] == [product.pk]

    @pytest.mark.parametrize("error", [IntegrityError("disk full"), OverflowError("int too large")])
    def test_store_failure_on_one_entry(self, make_product, monkeypatch, error):
        before = make_product("Croissant")
        broken = make_product("Baguette")
        after = make_product("Tarte")
        get_or_create = InventoryRecord.objects.get_or_create

        def failing_get_or_create(**kwargs):
            if kwargs["product"] == broken:
                raise error
            return get_or_create(**kwargs)

        monkeypatch.setattr(InventoryRecord.objects, "get_or_create", failing_get_or_create)
        report = upsert_entries([
            {"productId": p.pk, "date": DAY, "remaining": 1} for p in (before, broken, after)
        ])

        assert [o.ok for o in report.outcomes] == [True, False, True]
        assert report.failed == [f"Produit {broken.pk}: erreur lors de la sauvegarde."]
        assert set(InventoryRecord.objects.values_list("product_id", flat=True)) == {before.pk, after.pk}

    @pytest.mark.parametrize("entries", [None, {"productId": 1}, "[]", 3])
    def test_payload_must_be_a_list(self, entries):
        with pytest.raises(ValidationError):
            upsert_entries(entries)

    def test_outcomes_keep_submission_order(self, make_product):
        product = make_product("Croissant")

        report = upsert_entries([
            {"productId": product.pk, "date": DAY, "remaining": 1},
            {"productId": 999999, "date": DAY, "remaining": 1},
        ])

        assert [o.index for o in report.outcomes] == [0, 1]
        assert [o.ok for o in report.outcomes] == [True, False]
        assert report.outcomes[0].as_dict()["status"] == "success"
        assert report.outcomes[1].as_dict()["status"] == "error"


@pytest.mark.django_db
class TestChunking:

    def test_large_batch_is_split_into_chunks(self, make_product, settings):
        settings.INVENTORY_BATCH_SIZE = 4
        products = [make_product(f"Produit {i}") for i in range(10)]

        report = upsert_entries([
            {"productId": p.pk, "date": DAY, "remaining": i} for i, p in enumerate(products)
        ])

        assert report.chunks == 3
        assert len(report.succeeded) == 10
        assert report.performance["chunks"] == 3
        assert InventoryRecord.objects.count() == 10

    def test_empty_batch(self):
        report = upsert_entries([])

        assert report.chunks == 0
        assert report.succeeded == []


@pytest.mark.django_db
class TestListing:

    @pytest.fixture
    def ledger(self, make_product):
        tarte = make_product("Tarte", order=1)
        baguette = make_product("Baguette", order=2)
        brioche = make_product("Brioche", order=2)
        for day in (date(2025, 10, 25), date(2025, 10, 26)):
            for product in (brioche, baguette, tarte):
                InventoryRecord.objects.create(product=product, date=day, remaining=1, produced=5)
        return tarte, baguette, brioche

    def test_order_date_desc_then_product_order_then_name(self, ledger):
        tarte, baguette, brioche = ledger
        rows = [(r.date.day, r.product.name) for r in list_records()]

        assert rows == [
            (26, "Tarte"), (26, "Baguette"), (26, "Brioche"),
            (25, "Tarte"), (25, "Baguette"), (25, "Brioche"),
        ]

    def test_filters(self, ledger):
        tarte, _, _ = ledger

        assert len(list_records(date="2025-10-25")) == 3
        assert [r.date for r in list_records(product_id=str(tarte.pk))] == [date(2025, 10, 26), date(2025, 10, 25)]
        assert len(list_records(date=DAY, product_id=tarte.pk)) == 1

    def test_limit(self, ledger):
        assert len(list_records(limit="4")) == 4

    @pytest.mark.parametrize("kwargs", [{"date": "yesterday"}, {"product_id": "x"}, {"limit": "-2"}])
    def test_bad_filters(self, ledger, kwargs):
        with pytest.raises(ValidationError):
            list(list_records(**kwargs))

    def test_get_record(self, ledger):
        tarte, _, _ = ledger

        record = get_record(tarte.pk, DAY)
        assert record.product == tarte
        assert record.as_dict()["product"] == {"id": tarte.pk, "name": "Tarte", "order": 1}

        with pytest.raises(NotFoundError):
            get_record(tarte.pk, "2020-01-01")

    def test_out_of_range_product_filter(self, ledger):
        assert list(list_records(product_id=str(10 ** 20))) == []

    def test_oversized_limit(self, ledger):
        with pytest.raises(ValidationError):
            list(list_records(limit=str(10 ** 20)))

    def test_get_record_out_of_range_product(self, ledger):
        with pytest.raises(NotFoundError):
            get_record(10 ** 20, DAY)
