from decimal import Decimal

from django.test import TestCase, override_settings
from rest_framework.exceptions import NotFound

from backend.apps.payments.ledger import WalletLedger, to_money
from backend.apps.payments.models import LedgerEntry
from backend.core.exceptions import InsufficientBalance
from tests.factories import UserFactory


class WalletLedgerTests(TestCase):

    def setUp(self):
        self.ledger = WalletLedger()
        self.user = UserFactory(balance=Decimal("50.00"))

    def test_debit_reduces_balance_and_records_entry(self):
        new_balance = self.ledger.debit(self.user.pk, Decimal("20.00"), reference="order:ORD-1")

        self.assertEqual(new_balance, Decimal("30.00"))
        self.user.refresh_from_db()
        self.assertEqual(self.user.balance, Decimal("30.00"))
        entry = LedgerEntry.objects.get(user=self.user)
        self.assertEqual(entry.kind, LedgerEntry.Kind.DEBIT)
        self.assertEqual(entry.amount, Decimal("20.00"))
        self.assertEqual(entry.balance_after, Decimal("30.00"))
        self.assertEqual(entry.reference, "order:ORD-1")

    def test_debit_of_whole_balance_is_allowed(self):
        self.assertEqual(self.ledger.debit(self.user.pk, "50.00"), Decimal("0.00"))

    def test_debit_beyond_balance_is_rejected_without_side_effects(self):
        with self.assertRaises(InsufficientBalance) as ctx:
            self.ledger.debit(self.user.pk, Decimal("50.01"))

        self.assertEqual(str(ctx.exception.detail), "Insufficient wallet balance")
        self.user.refresh_from_db()
        self.assertEqual(self.user.balance, Decimal("50.00"))
        self.assertFalse(LedgerEntry.objects.exists())

    def test_sequential_debits_never_overdraw(self):
        successes = []
        for _ in range(4):
            try:
                self.ledger.debit(self.user.pk, Decimal("15.00"))
                successes.append(Decimal("15.00"))
            except InsufficientBalance:
                pass

        self.assertEqual(len(successes), 3)
        self.assertLessEqual(sum(successes), Decimal("50.00"))
        self.user.refresh_from_db()
        self.assertEqual(self.user.balance, Decimal("5.00"))

    def test_debit_for_missing_user(self):
        import uuid
        with self.assertRaises(NotFound):
            self.ledger.debit(uuid.uuid4(), Decimal("1.00"))

    def test_negative_amounts_are_refused(self):
        with self.assertRaises(ValueError):
            self.ledger.debit(self.user.pk, Decimal("-1.00"))
        with self.assertRaises(ValueError):
            self.ledger.credit(self.user.pk, Decimal("-1.00"))

    def test_credit_increases_balance(self):
        new_balance = self.ledger.credit(self.user.pk, Decimal("12.345"))

        # Amounts are rounded half-up to cents.
        self.assertEqual(new_balance, Decimal("62.35"))
        self.assertEqual(LedgerEntry.objects.get(user=self.user).kind, LedgerEntry.Kind.CREDIT)

    def test_credit_from_foreign_amount_converts_to_usd(self):
        credited = self.ledger.credit_from_foreign_amount(self.user.pk, Decimal("278.00"), "PKR")
        self.assertEqual(credited, Decimal("1.00"))
        self.assertEqual(self.ledger.balance(self.user.pk), Decimal("51.00"))

    def test_unknown_currency_is_treated_as_usd(self):
        credited = self.ledger.credit_from_foreign_amount(self.user.pk, Decimal("5.00"), "XYZ")
        self.assertEqual(credited, Decimal("5.00"))
        self.assertEqual(self.ledger.balance(self.user.pk), Decimal("55.00"))

    @override_settings(WALLET_EXCHANGE_RATES={"USD": "1", "EUR": "0.5"})
    def test_rates_come_from_settings(self):
        self.assertEqual(self.ledger.to_usd(Decimal("10.00"), "eur"), Decimal("20.00"))

    def test_injected_rates_override_settings(self):
        ledger = WalletLedger(exchange_rates={"GBP": "2"})
        self.assertEqual(ledger.rate_for("GBP"), Decimal("2"))
        self.assertEqual(ledger.rate_for("USD"), Decimal("1"))

    def test_to_money_rejects_garbage(self):
        with self.assertRaises(ValueError):
            to_money("abc")
        with self.assertRaises(ValueError):
            to_money("NaN")
