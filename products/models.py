from django.db import models
from django.core.validators import MinValueValidator


class Product(models.Model):
    """A sellable item. ``order`` only drives display and entry sequence."""
    name = models.CharField(max_length=120, unique=True)
    order = models.IntegerField(default=0, validators=[MinValueValidator(0)])
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Produit"
        verbose_name_plural = "Produits"
        ordering = ["order", "name"]

    def __str__(self):
        return self.name

    def as_dict(self):
        return {"id": self.id, "name": self.name, "order": self.order}
