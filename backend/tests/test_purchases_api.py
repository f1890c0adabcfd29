"""
Purchase endpoint tests.

Verifies:
- Both create paths record a delivery and add stock
- Missing/invalid fields return 400, unknown vendor/product 404
- Delete reverses stock; a repeated delete is 404
"""

import pytest

from conftest import get_balance, record_purchase


def _stock(client, product_id):
    return client.get(f'/api/products/{product_id}').get_json()['stock']


class TestCreatePurchase:
    @pytest.mark.parametrize('path', ['/api/vendors-purchases', '/api/purchases'])
    def test_creates_purchase_and_adds_stock(self, client, vendor, product, path):
        vendor_id, product_id = vendor.id, product.id

        resp = record_purchase(client, vendor_id, product_id, 3, 10.00, path=path)

        assert resp.status_code == 201
        body = resp.get_json()
        assert body['vendor_id'] == vendor_id
        assert body['product_id'] == product_id
        assert body['quantity'] == 3
        assert body['price'] == 10.0
        assert body['total'] == 30.0
        assert body['purchased_at'].endswith('Z')
        assert _stock(client, product_id) == 13

    def test_accepts_numeric_strings(self, client, vendor, product):
        resp = client.post('/api/vendors-purchases', json={
            'vendor_id': str(vendor.id),
            'product_id': str(product.id),
            'quantity': '2',
            'price': '12.50',
        })
        assert resp.status_code == 201
        assert resp.get_json()['total'] == 25.0

    def test_purchased_at_is_kept(self, client, vendor, product):
        resp = client.post('/api/purchases', json={
            'vendor_id': vendor.id,
            'product_id': product.id,
            'quantity': 1,
            'price': 5,
            'purchased_at': '2026-03-01T08:15:00Z',
        })
        assert resp.status_code == 201
        assert resp.get_json()['purchased_at'] == '2026-03-01T08:15:00Z'

    @pytest.mark.parametrize('missing', ['vendor_id', 'product_id', 'quantity', 'price'])
    def test_missing_field(self, client, vendor, product, missing):
        payload = {'vendor_id': vendor.id, 'product_id': product.id, 'quantity': 1, 'price': 1}
        payload.pop(missing)

        resp = client.post('/api/vendors-purchases', json=payload)

        assert resp.status_code == 400
        assert 'All fields required' in resp.get_json()['error']

    @pytest.mark.parametrize(
        'quantity,price',
        [(0, 10), (-1, 10), (1.5, 10), (1, 0), (1, -3), (1, 'ten'), (1, 1.005)],
    )
    def test_invalid_quantity_or_price(self, client, vendor, product, quantity, price):
        product_id = product.id
        resp = record_purchase(client, vendor.id, product_id, quantity, price)
        assert resp.status_code == 400
        assert 'error' in resp.get_json()
        assert _stock(client, product_id) == 10

    @pytest.mark.parametrize('price', ['99999999999999999999999999999', 1e30])
    def test_huge_price_rejected(self, client, vendor, product, price):
        vendor_id, product_id = vendor.id, product.id
        resp = record_purchase(client, vendor_id, product_id, 1, price)
        assert resp.status_code == 400
        assert 'cannot exceed' in resp.get_json()['error']
        assert _stock(client, product_id) == 10
        assert get_balance(client, vendor_id)['totalPurchases'] == 0

    def test_unknown_vendor(self, client, product):
        product_id = product.id
        resp = record_purchase(client, 424242, product_id, 1, 10)
        assert resp.status_code == 404
        assert resp.get_json() == {'error': 'Vendor not found'}
        assert _stock(client, product_id) == 10

    def test_unknown_product(self, client, vendor):
        vendor_id = vendor.id
        resp = record_purchase(client, vendor_id, 424242, 1, 10)
        assert resp.status_code == 404
        assert resp.get_json() == {'error': 'Product not found'}
        assert get_balance(client, vendor_id)['totalPurchases'] == 0


class TestListAndLookup:
    def test_list_newest_first_with_names(self, client, vendor, other_vendor, product):
        first = record_purchase(client, vendor.id, product.id, 1, 1).get_json()
        second = record_purchase(client, other_vendor.id, product.id, 2, 2).get_json()

        resp = client.get('/api/purchases')
        assert resp.status_code == 200
        rows = resp.get_json()
        assert [r['id'] for r in rows] == [second['id'], first['id']]
        assert rows[0]['vendor_name'] == 'City Wholesale'
        assert rows[0]['product_name'] == 'Basmati Rice 1kg'
        assert rows[0]['product_barcode'] == '12345'

    def test_filter_by_vendor(self, client, vendor, other_vendor, product):
        record_purchase(client, vendor.id, product.id, 1, 1)
        record_purchase(client, other_vendor.id, product.id, 2, 2)

        rows = client.get(f'/api/purchases?vendor_id={vendor.id}').get_json()
        assert len(rows) == 1
        assert rows[0]['vendor_id'] == vendor.id

    def test_filter_must_be_integer(self, client):
        resp = client.get('/api/purchases?vendor_id=abc')
        assert resp.status_code == 400

    def test_get_by_product_and_vendor(self, client, vendor, product):
        url = f'/api/purchases/getByProductAndVendor?product_id={product.id}&vendor_id={vendor.id}'
        assert client.get(url).get_json() is None

        record_purchase(client, vendor.id, product.id, 1, 8.25)
        latest = record_purchase(client, vendor.id, product.id, 1, 9.75).get_json()

        body = client.get(url).get_json()
        assert body['id'] == latest['id']
        assert body['price'] == 9.75

    def test_get_by_product_and_vendor_requires_both(self, client, product):
        resp = client.get(f'/api/purchases/getByProductAndVendor?product_id={product.id}')
        assert resp.status_code == 400

    def test_get_one(self, client, vendor, product):
        created = record_purchase(client, vendor.id, product.id, 4, 2.5).get_json()

        resp = client.get(f"/api/purchases/{created['id']}")
        assert resp.status_code == 200
        assert resp.get_json()['total'] == 10.0

    def test_get_one_not_found(self, client, db_session):
        assert client.get('/api/purchases/424242').status_code == 404


class TestDeletePurchase:
    def test_delete_reverses_stock_and_balance(self, client, vendor, product):
        vendor_id, product_id = vendor.id, product.id
        created = record_purchase(client, vendor_id, product_id, 6, 5).get_json()
        assert _stock(client, product_id) == 16

        resp = client.delete(f"/api/purchases/{created['id']}")

        assert resp.status_code == 204
        assert _stock(client, product_id) == 10
        assert get_balance(client, vendor_id)['totalPurchases'] == 0

    def test_second_delete_is_404(self, client, vendor, product):
        product_id = product.id
        created = record_purchase(client, vendor.id, product_id, 6, 5).get_json()
        assert client.delete(f"/api/purchases/{created['id']}").status_code == 204

        resp = client.delete(f"/api/purchases/{created['id']}")

        assert resp.status_code == 404
        assert resp.get_json() == {'error': 'Purchase not found'}
        assert _stock(client, product_id) == 10
