import json

import pytest

from products.models import Product


@pytest.fixture
def make_product(db):
    """Create a product; order defaults to the next free position."""
    def _make(name, order=None):
        if order is None:
            order = Product.objects.count() + 1
        return Product.objects.create(name=name, order=order)
    return _make


@pytest.fixture
def send_json(client):
    """client.<method>(url, json body) returning (response, decoded body)."""
    def _send(method, url, payload=None):
        response = getattr(client, method)(
            url,
            data=json.dumps(payload) if payload is not None else "",
            content_type="application/json",
        )
        return response, response.json()
    return _send
