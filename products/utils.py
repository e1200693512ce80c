import logging
import time

from django.conf import settings
from django.db import transaction
from django.db.models import Max

from core.exceptions import ConflictError, NotFoundError, ValidationError
from core.utils import MAX_INT, chunked, elapsed_ms, parse_id, parse_int, records_per_second
from .models import Product

logger = logging.getLogger(__name__)

NAME_MAX_LENGTH = Product._meta.get_field("name").max_length


def split_names(names_csv):
    """
    "Croissant, Pain, , Croissant" -> ["Croissant", "Pain"]
    Order of first appearance is kept.
    """
    names = []
    for raw in names_csv.split(","):
        name = raw.strip()
        if name and name not in names:
            names.append(name)
    return names


def get_product(product_id, lock=False):
    if product_id is None or product_id == "":
        raise ValidationError("ID du produit requis.")
    pk = parse_id(product_id, "id")
    if pk is None:
        raise NotFoundError(f"Produit {product_id} introuvable.")
    queryset = Product.objects.select_for_update() if lock else Product.objects
    try:
        return queryset.get(pk=pk)
    except Product.DoesNotExist:
        raise NotFoundError(f"Produit {pk} introuvable.")


def list_products():
    return Product.objects.order_by("order", "name")


def bulk_create_products(names_csv):
    """
    Create one product per comma-separated name, skipping names that already
    exist. Returns the number of products actually created.
    """
    if not isinstance(names_csv, str):
        raise ValidationError("Noms invalides.")

    names = split_names(names_csv)
    if not names:
        raise ValidationError("Aucun nom de produit valide fourni.")

    too_long = [name for name in names if len(name) > NAME_MAX_LENGTH]
    if too_long:
        raise ValidationError(f"Nom trop long (max {NAME_MAX_LENGTH} caractères): {too_long[0]}")

    with transaction.atomic():
        existing = set(Product.objects.filter(name__in=names).values_list("name", flat=True))
        new_names = [name for name in names if name not in existing]
        next_order = (Product.objects.aggregate(top=Max("order"))["top"] or 0) + 1

        # ignore_conflicts covers a concurrent insert of the same name
        Product.objects.bulk_create(
            [Product(name=name, order=next_order + i) for i, name in enumerate(new_names)],
            ignore_conflicts=True,
        )

    logger.info(
        f"[PRODUCTS] Bulk create: {len(new_names)} created, "
        f"{len(names) - len(new_names)} skipped as duplicates"
    )
    return len(new_names)


def rename_product(product, new_name):
    if not isinstance(new_name, str) or not new_name.strip():
        raise ValidationError("Le nouveau nom ne peut pas être vide.")
    new_name = new_name.strip()
    if len(new_name) > NAME_MAX_LENGTH:
        raise ValidationError(f"Nom trop long (max {NAME_MAX_LENGTH} caractères).")
    if Product.objects.filter(name=new_name).exclude(pk=product.pk).exists():
        raise ConflictError("Un produit avec ce nom existe déjà.")
    product.name = new_name
    return product


def reorder_product(product, new_order):
    try:
        product.order = parse_int(new_order, "newOrder", minimum=0)
    except ValidationError:
        raise ValidationError(f"L'ordre doit être un nombre positif (au plus {MAX_INT}).")
    return product


def update_product(product_id, new_name=None, new_order=None):
    """Rename and/or move a product. At least one change is required."""
    if new_name is None and new_order is None:
        raise ValidationError("Aucune donnée à modifier.")

    with transaction.atomic():
        product = get_product(product_id, lock=True)
        old_name, old_order = product.name, product.order
        if new_name is not None:
            rename_product(product, new_name)
        if new_order is not None:
            reorder_product(product, new_order)
        product.save(update_fields=["name", "order"])

    logger.info(
        f"[PRODUCTS] Updated #{product.pk}: name '{old_name}' -> '{product.name}', "
        f"order {old_order} -> {product.order}"
    )
    return product


def bulk_reorder_products(ordered_ids):
    """
    Give position i+1 to ordered_ids[i]. Either every product moves or none
    does: the whole batch runs in one transaction and all ids are checked
    before the first update.

    Returns (products sorted by new order, performance dict).
    """
    if not isinstance(ordered_ids, list):
        raise ValidationError("Format invalide. Attendu: { newOrder: [id1, id2, ...] }")
    ids = [parse_int(value, "newOrder", maximum=None) for value in ordered_ids]
    if len(set(ids)) != len(ids):
        raise ValidationError("Un même produit apparaît plusieurs fois dans le nouvel ordre.")

    logger.info(f"[REORDER] Starting reorder of {len(ids)} products")
    started = time.perf_counter()

    with transaction.atomic():
        storable = [pk for pk in ids if 0 < pk <= MAX_INT]
        products = {p.pk: p for p in Product.objects.select_for_update().filter(pk__in=storable)}
        missing = [pk for pk in ids if pk not in products]
        if missing:
            raise NotFoundError(
                f"Produits introuvables: {', '.join(str(pk) for pk in missing)}",
                missingIds=missing,
            )

        batches = list(chunked(ids, settings.PRODUCT_REORDER_BATCH_SIZE))
        position = 0
        for number, batch in enumerate(batches, start=1):
            changed = []
            for pk in batch:
                position += 1
                product = products[pk]
                product.order = position
                changed.append(product)
            Product.objects.bulk_update(changed, ["order"])
            logger.debug(f"[REORDER] Batch {number}/{len(batches)} done")

    duration = elapsed_ms(started)
    logger.info(f"[REORDER] Done in {duration}ms for {len(ids)} products")

    ordered = sorted(products.values(), key=lambda p: p.order)
    performance = {
        "duration": f"{duration}ms",
        "recordsPerSecond": records_per_second(len(ordered), duration),
    }
    return ordered, performance


def delete_product(product_id, force=False):
    """
    Delete a product. When inventory records reference it the delete is
    refused with a ConflictError carrying their count, unless ``force`` is
    set, in which case the records go first.

    Returns the number of inventory records deleted along with the product.
    """
    with transaction.atomic():
        product = get_product(product_id, lock=True)
        records = product.inventory_records.all()
        count = records.count()

        if count and not force:
            raise ConflictError(
                "Ce produit a des inventaires associés.",
                canForceDelete=True,
                inventoryCount=count,
            )

        if count:
            records.delete()
        name = product.name
        product.delete()

    logger.info(f"[PRODUCTS] Deleted '{name}' (#{product_id}) with {count} inventory record(s)")
    return count
