from models.admins import Admin
from models.products import Product
from models.traders import Trader, TraderStatus
from models.trader_bills import TraderBill, BillPaymentStatus
from models.trader_bill_items import TraderBillItem
from models.trader_payments import TraderPayment

__all__ = ['Admin', 'BillPaymentStatus', 'Product', 'Trader', 'TraderBill', 'TraderBillItem', 'TraderPayment', 'TraderStatus',]
