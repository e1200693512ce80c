from django import forms


class ProductBulkForm(forms.Form):
    """Comma-separated product names, e.g. "Croissant, Baguette, Éclair"."""
    names = forms.CharField(
        label="Nouveaux produits",
        widget=forms.Textarea(attrs={'rows': 2, 'placeholder': 'Croissant, Baguette, Pain de campagne'}),
    )
