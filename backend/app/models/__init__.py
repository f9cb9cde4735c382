# Import every model so Base.metadata knows all tables
from .user import User
from .bank import Bank, BankAccount, BankBalanceHistory, BankTeamleadAssignment
from .casino import Casino
from .card import Card, CardCasinoAssignment, CardSecret, CardAccessLog
from .test_work import TestWork, TestWithdrawal
from .work import Work, WorkWithdrawal
from .paypal import PayPalAccount, PayPalWork, PayPalWithdrawal
from .task import Task
from .notification import Notification
