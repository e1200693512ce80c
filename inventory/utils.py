import logging
import time
from dataclasses import dataclass, field

from django.conf import settings
from django.db import DatabaseError, models, transaction
from django.db.models import F, Value
from django.db.models.functions import Coalesce
from django.utils import timezone

from core.exceptions import NotFoundError, TrackerError, ValidationError
from core.utils import (
    MAX_INT, chunked, elapsed_ms, parse_bool, parse_date, parse_id, parse_int, records_per_second, today,
)
from products.models import Product
from .models import InventoryRecord

logger = logging.getLogger(__name__)

QUANTITY_FIELDS = ("remaining", "produced", "planned")


@dataclass
class EntryOutcome:
    """Result of one submitted entry: either a saved record or a reason."""
    index: int
    product_id: object = None
    record: InventoryRecord = None
    created: bool = False
    error: str = None

    @property
    def ok(self):
        return self.error is None

    def as_dict(self):
        if self.ok:
            return {"index": self.index, "status": "success", "created": self.created,
                    "record": self.record.as_dict()}
        return {"index": self.index, "status": "error", "productId": self.product_id,
                "error": self.error}


@dataclass
class UpsertReport:
    outcomes: list = field(default_factory=list)
    duration_ms: int = 0
    chunks: int = 0

    @property
    def succeeded(self):
        return [outcome.record for outcome in self.outcomes if outcome.ok]

    @property
    def failed(self):
        return [outcome.error for outcome in self.outcomes if not outcome.ok]

    @property
    def performance(self):
        return {
            "duration": f"{self.duration_ms}ms",
            "chunks": self.chunks,
            "recordsPerSecond": records_per_second(len(self.outcomes), self.duration_ms),
        }


def clean_entry(entry, products):
    """
    Validate one raw entry and resolve its product.
    Returns (product, date, quantities, addition_mode); quantities only holds
    the fields the entry actually supplied.
    """
    if not isinstance(entry, dict):
        raise ValidationError("Entrée invalide: un objet est attendu.")

    raw_id = entry.get("productId")
    if raw_id is None or raw_id == "":
        raise ValidationError("productId requis.")
    try:
        product_id = parse_id(raw_id, "productId")
    except ValidationError:
        raise ValidationError(f"Produit {raw_id}: productId invalide.")
    if product_id is None:
        raise NotFoundError(f"Produit avec l'ID {raw_id} introuvable.")

    if product_id not in products:
        products[product_id] = Product.objects.filter(pk=product_id).first()
    product = products[product_id]
    if product is None:
        raise NotFoundError(f"Produit avec l'ID {product_id} introuvable.")

    quantities = {}
    for name in QUANTITY_FIELDS:
        value = entry.get(name)
        if value is None:
            continue
        try:
            quantities[name] = parse_int(value, name, maximum=None)
        except ValidationError:
            raise ValidationError(f"Produit {product_id}: {name} doit être un nombre entier.")
        if quantities[name] < 0:
            raise ValidationError(f"Produit {product_id}: les quantités ne peuvent pas être négatives.")
        if quantities[name] > MAX_INT:
            raise ValidationError(f"Produit {product_id}: {name} dépasse la valeur maximale ({MAX_INT}).")
    if not quantities:
        raise ValidationError(f"Produit {product_id}: aucune quantité fournie.")

    raw_date = entry.get("date")
    try:
        entry_date = parse_date(raw_date) if raw_date else today()
    except ValidationError:
        raise ValidationError(f"Produit {product_id}: date invalide ({raw_date}).")

    return product, entry_date, quantities, parse_bool(entry.get("additionMode", False))


def upsert_record(product, entry_date, quantities, addition_mode=False):
    """
    Create or update the (product, date) row.

    On create every supplied quantity is stored and ``remaining`` falls back
    to 0. On update only supplied quantities are overwritten. In addition
    mode ``produced`` is incremented in the database (COALESCE(produced, 0)
    + n) so two concurrent additions both count.
    """
    record, created = InventoryRecord.objects.get_or_create(
        product=product, date=entry_date, defaults=dict(quantities),
    )
    if not created:
        updates = dict(quantities)
        if addition_mode and "produced" in quantities:
            updates["produced"] = Coalesce(
                F("produced"), Value(0), output_field=models.IntegerField()
            ) + Value(quantities["produced"])
        updates["updated_at"] = timezone.now()
        InventoryRecord.objects.filter(pk=record.pk).update(**updates)
        record.refresh_from_db()
    record.product = product
    return record, created


def process_entry(index, entry, products):
    raw_id = entry.get("productId") if isinstance(entry, dict) else None
    try:
        product, entry_date, quantities, addition_mode = clean_entry(entry, products)
        with transaction.atomic():
            record, created = upsert_record(product, entry_date, quantities, addition_mode)
    except TrackerError as e:
        return EntryOutcome(index=index, product_id=raw_id, error=e.message)
    except (DatabaseError, OverflowError) as e:
        logger.exception(f"[INVENTORY] Save failed for product {raw_id}: {e}")
        return EntryOutcome(index=index, product_id=raw_id,
                            error=f"Produit {raw_id}: erreur lors de la sauvegarde.")
    return EntryOutcome(index=index, product_id=product.pk, record=record, created=created)


def upsert_entries(entries):
    """
    Save a batch of inventory entries.

    Each entry succeeds or fails on its own; a bad entry never aborts the
    batch. Entries are committed in chunks of INVENTORY_BATCH_SIZE, each
    chunk in its own transaction and each entry in a savepoint.
    """
    if not isinstance(entries, list):
        raise ValidationError("Format invalide. Attendu: { inventories: [...] }")

    started = time.perf_counter()
    report = UpsertReport()
    products = {}
    batches = list(chunked(entries, settings.INVENTORY_BATCH_SIZE))

    for number, batch in enumerate(batches, start=1):
        chunk_started = time.perf_counter()
        with transaction.atomic():
            for entry in batch:
                report.outcomes.append(process_entry(len(report.outcomes), entry, products))

        chunk_ms = elapsed_ms(chunk_started)
        if chunk_ms > settings.INVENTORY_CHUNK_WARN_SECONDS * 1000:
            logger.warning(f"[INVENTORY] Chunk {number}/{len(batches)} took {chunk_ms}ms")
        else:
            logger.debug(f"[INVENTORY] Chunk {number}/{len(batches)} done in {chunk_ms}ms")

    report.chunks = len(batches)
    report.duration_ms = elapsed_ms(started)
    logger.info(
        f"[INVENTORY] Upsert of {len(entries)} entries: {len(report.succeeded)} saved, "
        f"{len(report.failed)} rejected in {report.duration_ms}ms"
    )
    return report


def list_records(date=None, product_id=None, limit=None):
    records = InventoryRecord.objects.select_related("product")
    if date:
        records = records.filter(date=parse_date(date))
    if product_id not in (None, ""):
        pk = parse_id(product_id, "productId")
        # an id no product can have filters like an unknown one: no rows
        records = records.filter(product_id=pk) if pk is not None else records.none()
    records = records.order_by("-date", "product__order", "product__name")
    if limit not in (None, ""):
        records = records[:parse_int(limit, "limit", minimum=0)]
    return records


def get_record(product_id, date):
    pk = parse_id(product_id, "productId")
    day = parse_date(date)
    try:
        if pk is None:
            raise InventoryRecord.DoesNotExist
        return InventoryRecord.objects.select_related("product").get(product_id=pk, date=day)
    except InventoryRecord.DoesNotExist:
        raise NotFoundError(f"Aucun inventaire pour le produit {product_id} le {date}.")
