from .inventory import Product
from .vendors import Vendor, Purchase, VendorPayment
from .sales import Bill, BillItem

__all__ = [
    'Product',
    'Vendor', 'Purchase', 'VendorPayment',
    'Bill', 'BillItem',
]
