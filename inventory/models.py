from django.db import models
from django.core.validators import MinValueValidator
from django.utils import timezone


class InventoryRecord(models.Model):
    """
    One row per product per day.
    - remaining: left unsold at closing (entered by the seller)
    - produced: baked that day (entered by the baker, may be accumulated)
    - planned: target quantity for that day, entered the day before
    The three quantities are independent; produced < remaining is accepted.
    """
    product = models.ForeignKey('products.Product', on_delete=models.PROTECT, related_name='inventory_records')
    date = models.DateField(default=timezone.localdate)
    remaining = models.PositiveIntegerField(default=0)
    produced = models.PositiveIntegerField(null=True, blank=True, validators=[MinValueValidator(0)])
    planned = models.PositiveIntegerField(null=True, blank=True, validators=[MinValueValidator(0)])
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Inventaire"
        verbose_name_plural = "Inventaires"
        ordering = ["-date", "product__order", "product__name"]
        constraints = [
            models.UniqueConstraint(fields=["product", "date"], name="unique_inventory_product_date"),
        ]
        indexes = [
            models.Index(fields=["date"], name="inventory_record_date_idx"),
        ]

    def __str__(self):
        return f"{self.product.name} - {self.date}: reste {self.remaining}, produit {self.produced}"

    @property
    def sold(self):
        return max(0, (self.produced or 0) - self.remaining)

    def as_dict(self):
        return {
            "id": self.id,
            "productId": self.product_id,
            "date": self.date.isoformat(),
            "remaining": self.remaining,
            "produced": self.produced,
            "planned": self.planned,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
            "product": self.product.as_dict(),
        }
