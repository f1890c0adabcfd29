"""
Bill (counter sale) endpoint tests.

Verifies:
- A bill and the stock it takes are written as one unit
- Unknown products or bad lines reject the whole bill
- Listing, analytics, daily sales and top products read back the bills
"""

from datetime import timedelta

import pytest

from mallpos.extensions import db
from mallpos.models import Bill, BillItem, Product
from mallpos.services import billing_service
from mallpos.time_utils import utcnow


def _stock(client, product_id):
    return client.get(f'/api/products/{product_id}').get_json()['stock']


def _sell(client, *items, **extra):
    return client.post('/api/bills', json={'items': list(items), **extra})


@pytest.fixture
def oil(db_session):
    p = Product(name="Sunflower Oil 1L", barcode="OIL1", price_cents=15000, stock=4)
    db_session.add(p)
    db_session.commit()
    return p


def _bill_at(days_ago, total_cents, **fields):
    bill = Bill(
        total_cents=total_cents,
        payment_method=fields.pop('payment_method', 'cash'),
        created_at=utcnow() - timedelta(days=days_ago),
        **fields,
    )
    db.session.add(bill)
    db.session.commit()
    return bill


class TestCreateBill:
    def test_bill_takes_stock(self, client, product):
        product_id = product.id

        resp = _sell(client, {'productId': product_id, 'quantity': 3})

        assert resp.status_code == 201
        body = resp.get_json()
        assert body['total'] == 60.0
        assert body['payment_method'] == 'cash'
        assert body['created_at'].endswith('Z')
        assert body['items'] == [{
            'id': body['items'][0]['id'],
            'product_id': product_id,
            'name': 'Basmati Rice 1kg',
            'barcode': '12345',
            'quantity': 3,
            'price': 20.0,
            'subtotal': 60.0,
        }]
        assert _stock(client, product_id) == 7

    def test_several_products(self, client, product, oil):
        product_id, oil_id = product.id, oil.id

        resp = _sell(
            client,
            {'productId': oil_id, 'quantity': 1},
            {'product_id': product_id, 'quantity': 2},
            {'productId': product_id, 'quantity': 1},
            paymentMethod='UPI',
            customerName='Asha',
            customerPhone=' 9000000001 ',
        )

        assert resp.status_code == 201
        body = resp.get_json()
        assert body['total'] == 150.0 + 3 * 20.0
        assert body['payment_method'] == 'upi'
        assert body['customer_phone'] == '9000000001'
        assert _stock(client, product_id) == 7
        assert _stock(client, oil_id) == 3

    def test_price_override(self, client, product):
        resp = _sell(client, {'productId': product.id, 'quantity': 2, 'price': '12.50'})
        assert resp.get_json()['total'] == 25.0

    def test_overselling_goes_negative(self, client, product):
        product_id = product.id
        assert _sell(client, {'productId': product_id, 'quantity': 12}).status_code == 201
        assert _stock(client, product_id) == -2

    @pytest.mark.parametrize('payload', [{}, {'items': []}, {'items': 'rice'}])
    def test_no_items(self, client, db_session, payload):
        resp = client.post('/api/bills', json=payload)
        assert resp.status_code == 400
        assert resp.get_json() == {'error': 'No items to bill'}

    @pytest.mark.parametrize(
        'override',
        [
            {'productId': None},
            {'productId': 'rice'},
            {'quantity': 0},
            {'quantity': -2},
            {'quantity': 1.5},
            {'price': -1},
            {'price': 1.005},
        ],
    )
    def test_bad_line_rejects_bill(self, client, product, override):
        product_id = product.id

        resp = _sell(
            client,
            {'productId': product_id, 'quantity': 1},
            {'productId': product_id, 'quantity': 1, **override},
        )

        assert resp.status_code == 400
        assert _stock(client, product_id) == 10
        assert db.session.query(Bill).count() == 0

    def test_bad_payment_method(self, client, product):
        resp = _sell(client, {'productId': product.id, 'quantity': 1}, paymentMethod='barter')
        assert resp.status_code == 400
        assert 'Invalid paymentMethod' in resp.get_json()['error']

    def test_unknown_product_rejects_whole_bill(self, client, product):
        product_id = product.id

        resp = _sell(
            client,
            {'productId': product_id, 'quantity': 2},
            {'productId': 424242, 'quantity': 1},
        )

        assert resp.status_code == 404
        assert _stock(client, product_id) == 10
        assert db.session.query(Bill).count() == 0
        assert db.session.query(BillItem).count() == 0

    def test_failure_after_stock_change_leaves_nothing(self, client, monkeypatch, product, oil):
        product_id, oil_id = product.id, oil.id
        real = billing_service.apply_stock_delta
        calls = []

        def second_line_fails(prod, delta, *, reason):
            calls.append(prod.id)
            real(prod, delta, reason=reason)
            db.session.flush()
            if len(calls) == 2:
                raise RuntimeError("disk full")

        monkeypatch.setattr(billing_service, 'apply_stock_delta', second_line_fails)

        with pytest.raises(RuntimeError):
            billing_service.create_bill(lines=[
                billing_service.BillLine(product_id=product_id, quantity=2),
                billing_service.BillLine(product_id=oil_id, quantity=1),
            ])

        assert db.session.query(Bill).count() == 0
        assert _stock(client, product_id) == 10
        assert _stock(client, oil_id) == 4

    def test_product_with_sales_cannot_be_deleted(self, client, product):
        product_id = product.id
        _sell(client, {'productId': product_id, 'quantity': 1})

        resp = client.delete(f'/api/products/{product_id}')

        assert resp.status_code == 409
        assert 'sales history' in resp.get_json()['error']


class TestListBills:
    def test_list_newest_first(self, client, product):
        first = _sell(client, {'productId': product.id, 'quantity': 1}).get_json()
        second = _sell(client, {'productId': product.id, 'quantity': 2}).get_json()

        rows = client.get('/api/bills').get_json()

        assert [r['id'] for r in rows] == [second['id'], first['id']]
        assert rows[0]['total'] == 40.0
        assert 'items' not in rows[0]

    def test_list_is_capped(self, client, db_session):
        for _ in range(55):
            _bill_at(0, 100)
        assert len(client.get('/api/bills').get_json()) == 50

    def test_get_one_with_items(self, client, product):
        created = _sell(client, {'productId': product.id, 'quantity': 2}).get_json()

        body = client.get(f"/api/bills/{created['id']}").get_json()

        assert body['total'] == 40.0
        assert body['items'][0]['quantity'] == 2

    def test_get_one_not_found(self, client, db_session):
        resp = client.get('/api/bills/424242')
        assert resp.status_code == 404
        assert resp.get_json() == {'error': 'Bill not found'}


class TestAnalytics:
    def test_today(self, client, db_session):
        _bill_at(0, 2000)
        _bill_at(0, 6050)
        _bill_at(3, 99900)

        body = client.get('/api/bills/analytics').get_json()

        assert body['period'] == 'today'
        assert body['total_transactions'] == 2
        assert body['total_sales'] == 80.5
        assert body['avg_transaction_value'] == 40.25
        assert body['min_transaction'] == 20.0
        assert body['max_transaction'] == 60.5

    @pytest.mark.parametrize('period,count', [('week', 2), ('month', 3), ('year', 4)])
    def test_periods(self, client, db_session, period, count):
        _bill_at(0, 100)
        _bill_at(3, 100)
        _bill_at(20, 100)
        _bill_at(200, 100)
        _bill_at(400, 100)

        body = client.get(f'/api/bills/analytics?period={period}').get_json()
        assert body['total_transactions'] == count

    def test_empty(self, client, db_session):
        body = client.get('/api/bills/analytics?period=week').get_json()
        assert body['total_transactions'] == 0
        assert body['total_sales'] == 0
        assert body['avg_transaction_value'] == 0
        assert body['min_transaction'] == 0
        assert body['max_transaction'] == 0

    def test_unknown_period_means_today(self, client, db_session):
        _bill_at(0, 100)
        _bill_at(3, 100)
        assert client.get('/api/bills/analytics?period=decade').get_json()['total_transactions'] == 1


class TestDailySales:
    def test_grouped_by_day_newest_first(self, client, db_session):
        _bill_at(0, 1000)
        _bill_at(0, 500)
        _bill_at(2, 250)
        _bill_at(45, 9999)

        rows = client.get('/api/bills/daily-sales').get_json()

        today = utcnow().strftime('%Y-%m-%d')
        two_days_ago = (utcnow() - timedelta(days=2)).strftime('%Y-%m-%d')
        assert rows == [
            {'date': today, 'transactions': 2, 'sales': 15.0},
            {'date': two_days_ago, 'transactions': 1, 'sales': 2.5},
        ]

    def test_days_window(self, client, db_session):
        _bill_at(0, 100)
        _bill_at(45, 100)
        assert len(client.get('/api/bills/daily-sales?days=60').get_json()) == 2

    @pytest.mark.parametrize('days', ['abc', '0', '-3'])
    def test_bad_days(self, client, db_session, days):
        assert client.get(f'/api/bills/daily-sales?days={days}').status_code == 400


class TestTopProducts:
    def test_ranked_by_revenue(self, client, product, oil):
        product_id, oil_id = product.id, oil.id
        _sell(client, {'productId': product_id, 'quantity': 5})
        _sell(client, {'productId': product_id, 'quantity': 1}, {'productId': oil_id, 'quantity': 1})

        rows = client.get('/api/bills/top-products').get_json()

        assert rows == [
            {'product_id': oil_id, 'name': 'Sunflower Oil 1L', 'barcode': 'OIL1',
             'total_quantity': 1, 'total_revenue': 150.0},
            {'product_id': product_id, 'name': 'Basmati Rice 1kg', 'barcode': '12345',
             'total_quantity': 6, 'total_revenue': 120.0},
        ]

    def test_limit(self, client, product, oil):
        _sell(client, {'productId': product.id, 'quantity': 1}, {'productId': oil.id, 'quantity': 1})
        rows = client.get('/api/bills/top-products?limit=1').get_json()
        assert [r['name'] for r in rows] == ['Sunflower Oil 1L']

    @pytest.mark.parametrize('limit', ['0', 'ten', '1000'])
    def test_bad_limit(self, client, db_session, limit):
        assert client.get(f'/api/bills/top-products?limit={limit}').status_code == 400
