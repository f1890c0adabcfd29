"""
Vendor directory, payment and balance endpoint tests.
"""

import pytest

from conftest import get_balance, record_payment, record_purchase


# =============================================================================
# VENDOR DIRECTORY
# =============================================================================


class TestVendorDirectory:
    def test_create_vendor(self, client, db_session):
        resp = client.post('/api/vendors', json={
            'name': '  Sunrise Dairy ',
            'phone': '040-555-0199',
            'gst_number': '36ABCDE1234F1Z5',
            'id': 77,  # read-only, ignored
        })
        assert resp.status_code == 201
        body = resp.get_json()
        assert body['name'] == 'Sunrise Dairy'
        assert body['gst_number'] == '36ABCDE1234F1Z5'
        assert body['payment_terms_days'] == 30
        assert body['email'] is None

    @pytest.mark.parametrize('payload', [{}, {'name': ''}, {'phone': '123'}])
    def test_create_requires_name(self, client, db_session, payload):
        resp = client.post('/api/vendors', json=payload)
        assert resp.status_code == 400
        assert resp.get_json() == {'error': 'Vendor name required'}

    def test_create_rejects_negative_terms(self, client, db_session):
        resp = client.post('/api/vendors', json={'name': 'X', 'payment_terms_days': -1})
        assert resp.status_code == 400

    def test_list_sorted_by_name(self, client, vendor, other_vendor):
        names = [v['name'] for v in client.get('/api/vendors').get_json()]
        assert names == ['City Wholesale', 'Fresh Farms']

    def test_search(self, client, vendor, other_vendor):
        rows = client.get('/api/vendors?search=citywholesale').get_json()
        assert [v['name'] for v in rows] == ['City Wholesale']

        rows = client.get('/api/vendors?search=98765').get_json()
        assert [v['name'] for v in rows] == ['Fresh Farms']

    def test_get_vendor(self, client, vendor):
        resp = client.get(f'/api/vendors/{vendor.id}')
        assert resp.status_code == 200
        assert resp.get_json()['name'] == 'Fresh Farms'

    def test_get_vendor_not_found(self, client, db_session):
        resp = client.get('/api/vendors/424242')
        assert resp.status_code == 404
        assert resp.get_json() == {'error': 'Vendor not found'}

    def test_update_vendor(self, client, vendor):
        resp = client.put(f'/api/vendors/{vendor.id}', json={'contact_name': 'Ravi', 'notes': ''})
        assert resp.status_code == 200
        body = resp.get_json()
        assert body['contact_name'] == 'Ravi'
        assert body['notes'] is None
        assert body['name'] == 'Fresh Farms'

    def test_update_blank_name_rejected(self, client, vendor):
        resp = client.put(f'/api/vendors/{vendor.id}', json={'name': '   '})
        assert resp.status_code == 400

    def test_update_not_found(self, client, db_session):
        assert client.put('/api/vendors/424242', json={'name': 'X'}).status_code == 404

    def test_with_products(self, client, vendor, other_vendor, product):
        client.put(f'/api/products/{product.id}', json={'vendor_id': vendor.id})

        rows = client.get('/api/vendors/with-products').get_json()
        assert rows == [{'id': vendor.id, 'name': 'Fresh Farms'}]


class TestDeleteVendor:
    def test_delete_removes_vendor_and_payments(self, client, vendor):
        vendor_id = vendor.id
        record_payment(client, vendor_id, 100)

        resp = client.delete(f'/api/vendors/{vendor_id}')

        assert resp.status_code == 204
        assert client.get(f'/api/vendors/{vendor_id}').status_code == 404
        assert client.get('/api/vendors/payments').get_json() == []

    def test_delete_with_purchases_conflicts(self, client, vendor, product):
        vendor_id = vendor.id
        record_purchase(client, vendor_id, product.id, 1, 1)

        resp = client.delete(f'/api/vendors/{vendor_id}')

        assert resp.status_code == 409
        assert 'purchase history' in resp.get_json()['error']
        assert client.get(f'/api/vendors/{vendor_id}').status_code == 200

    def test_delete_with_assigned_products_conflicts(self, client, vendor, product):
        vendor_id = vendor.id
        client.put(f'/api/products/{product.id}', json={'vendor_id': vendor_id})

        resp = client.delete(f'/api/vendors/{vendor_id}')

        assert resp.status_code == 409
        assert 'products assigned' in resp.get_json()['error']

    def test_delete_not_found(self, client, db_session):
        assert client.delete('/api/vendors/424242').status_code == 404


# =============================================================================
# PAYMENTS
# =============================================================================


class TestVendorPayments:
    def test_record_payment(self, client, vendor):
        resp = record_payment(
            client, vendor.id, '1500.50',
            payment_mode='UPI', reference_number='UTR123', payment_date='2026-02-01',
        )
        assert resp.status_code == 201
        body = resp.get_json()
        assert body['amount'] == 1500.5
        assert body['payment_mode'] == 'upi'
        assert body['reference_number'] == 'UTR123'
        assert body['transaction_id'] is None
        assert body['payment_date'] == '2026-02-01T00:00:00Z'

    def test_mode_defaults_to_cash(self, client, vendor):
        assert record_payment(client, vendor.id, 10).get_json()['payment_mode'] == 'cash'

    @pytest.mark.parametrize('amount', [0, -5, None, 'abc', 1.234])
    def test_invalid_amount(self, client, vendor, amount):
        vendor_id = vendor.id
        resp = record_payment(client, vendor_id, amount)
        assert resp.status_code == 400
        assert client.get(f'/api/vendors/{vendor_id}/payments').get_json() == []

    @pytest.mark.parametrize('amount', [1e30, '99999999999999999999999999999'])
    def test_huge_amount_rejected(self, client, vendor, amount):
        vendor_id = vendor.id
        resp = record_payment(client, vendor_id, amount)
        assert resp.status_code == 400
        assert 'cannot exceed' in resp.get_json()['error']
        assert get_balance(client, vendor_id)['totalPayments'] == 0

    def test_invalid_mode(self, client, vendor):
        resp = record_payment(client, vendor.id, 10, payment_mode='barter')
        assert resp.status_code == 400
        assert 'Invalid payment_mode' in resp.get_json()['error']

    def test_invalid_date(self, client, vendor):
        resp = record_payment(client, vendor.id, 10, payment_date='next tuesday')
        assert resp.status_code == 400

    def test_unknown_vendor(self, client, db_session):
        resp = record_payment(client, 424242, 10)
        assert resp.status_code == 404

    def test_list_vendor_payments(self, client, vendor, other_vendor):
        record_payment(client, vendor.id, 10, payment_date='2026-01-01')
        latest = record_payment(client, vendor.id, 20, payment_date='2026-01-15').get_json()
        record_payment(client, other_vendor.id, 30)

        rows = client.get(f'/api/vendors/{vendor.id}/payments').get_json()
        assert [p['amount'] for p in rows] == [20.0, 10.0]
        assert rows[0]['id'] == latest['id']

    def test_list_vendor_payments_unknown_vendor(self, client, db_session):
        assert client.get('/api/vendors/424242/payments').status_code == 404

    def test_list_all_payments_with_vendor_name(self, client, vendor, other_vendor):
        record_payment(client, vendor.id, 10, payment_date='2026-01-01')
        record_payment(client, other_vendor.id, 30, payment_date='2026-01-02')

        rows = client.get('/api/vendors/payments').get_json()
        assert [p['vendor_name'] for p in rows] == ['City Wholesale', 'Fresh Farms']

    def test_delete_payment(self, client, vendor):
        vendor_id = vendor.id
        payment = record_payment(client, vendor_id, 40).get_json()

        assert client.delete(f"/api/vendors/payments/{payment['id']}").status_code == 204
        assert client.delete(f"/api/vendors/payments/{payment['id']}").status_code == 404
        assert get_balance(client, vendor_id)['totalPayments'] == 0


# =============================================================================
# BALANCE
# =============================================================================


class TestVendorBalanceEndpoint:
    def test_due(self, client, vendor, product):
        record_purchase(client, vendor.id, product.id, 3, 10.00)
        record_payment(client, vendor.id, 15.00)

        assert get_balance(client, vendor.id) == {
            'totalPurchases': 30.0,
            'totalPayments': 15.0,
            'outstandingBalance': 15.0,
            'status': 'due',
        }

    def test_settled(self, client, vendor, product):
        record_purchase(client, vendor.id, product.id, 2, 50)
        record_purchase(client, vendor.id, product.id, 1, 20)
        record_payment(client, vendor.id, 120)

        balance = get_balance(client, vendor.id)
        assert balance['outstandingBalance'] == 0
        assert balance['status'] == 'settled'

    def test_advance(self, client, vendor):
        record_payment(client, vendor.id, 200)

        balance = get_balance(client, vendor.id)
        assert balance['totalPurchases'] == 0
        assert balance['outstandingBalance'] == -200.0
        assert balance['status'] == 'advance'

    def test_cents_do_not_drift(self, client, vendor, product):
        for _ in range(3):
            record_purchase(client, vendor.id, product.id, 1, 0.1)
        record_payment(client, vendor.id, 0.3)

        assert get_balance(client, vendor.id)['status'] == 'settled'

    def test_unknown_vendor(self, client, db_session):
        resp = client.get('/api/vendors/424242/balance')
        assert resp.status_code == 404
        assert resp.get_json() == {'error': 'Vendor not found'}
