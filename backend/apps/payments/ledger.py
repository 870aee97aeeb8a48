"""
Wallet ledger.

Balances are stored in USD on the user row. Every mutation is a single
conditional UPDATE so that concurrent purchases can never both pass a stale
balance check: the ``balance >= amount`` guard and the decrement happen in the
same statement.
"""
import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import F
from rest_framework.exceptions import NotFound

from backend.core.exceptions import InsufficientBalance

from .models import TWO_PLACES, LedgerEntry

logger = logging.getLogger(__name__)


def to_money(value):
    """Coerce ``value`` to a two-place Decimal."""
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise ValueError(f"Invalid monetary amount: {value!r}")
    if not amount.is_finite():
        raise ValueError(f"Invalid monetary amount: {value!r}")
    return amount.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


class WalletLedger:
    """Atomic debit/credit operations on a user's USD balance."""

    def __init__(self, exchange_rates=None):
        self._exchange_rates = exchange_rates

    @property
    def exchange_rates(self):
        rates = self._exchange_rates
        if rates is None:
            rates = settings.WALLET_EXCHANGE_RATES
        return {code.upper(): Decimal(str(rate)) for code, rate in rates.items()}

    def rate_for(self, currency):
        """Units of ``currency`` per USD. Unknown codes are treated as USD."""
        rate = self.exchange_rates.get((currency or "USD").upper())
        if rate is None or rate <= 0:
            return Decimal("1")
        return rate

    def to_usd(self, amount, currency):
        return to_money(Decimal(str(amount)) / self.rate_for(currency))

    def balance(self, user_id):
        User = get_user_model()
        try:
            return User.objects.values_list("balance", flat=True).get(pk=user_id)
        except User.DoesNotExist:
            raise NotFound("User not found")

    def debit(self, user_id, amount, reference=""):
        """
        Take ``amount`` USD from the wallet and return the new balance.
        Raises InsufficientBalance when the balance does not cover it.
        """
        amount = self._validated(amount)
        User = get_user_model()
        with transaction.atomic():
            updated = User.objects.filter(pk=user_id, balance__gte=amount).update(
                balance=F("balance") - amount
            )
            if not updated:
                if not User.objects.filter(pk=user_id).exists():
                    raise NotFound("User not found")
                raise InsufficientBalance()
            new_balance = self.balance(user_id)
            self._record(user_id, LedgerEntry.Kind.DEBIT, amount, new_balance, reference)
        logger.info("Debited %s USD from user %s (balance %s)", amount, user_id, new_balance)
        return new_balance

    def credit(self, user_id, amount, reference=""):
        """Add ``amount`` USD to the wallet and return the new balance."""
        amount = self._validated(amount)
        User = get_user_model()
        with transaction.atomic():
            updated = User.objects.filter(pk=user_id).update(balance=F("balance") + amount)
            if not updated:
                raise NotFound("User not found")
            new_balance = self.balance(user_id)
            self._record(user_id, LedgerEntry.Kind.CREDIT, amount, new_balance, reference)
        logger.info("Credited %s USD to user %s (balance %s)", amount, user_id, new_balance)
        return new_balance

    def credit_from_foreign_amount(self, user_id, amount, currency, reference=""):
        """Convert ``amount`` in ``currency`` to USD, credit it and return the USD figure."""
        usd_amount = self.to_usd(amount, currency)
        self.credit(user_id, usd_amount, reference=reference)
        return usd_amount

    @staticmethod
    def _validated(amount):
        amount = to_money(amount)
        if amount < 0:
            raise ValueError("Ledger amounts must not be negative.")
        return amount

    @staticmethod
    def _record(user_id, kind, amount, balance_after, reference):
        if amount == 0:
            return
        LedgerEntry.objects.create(
            user_id=user_id,
            kind=kind,
            amount=amount,
            balance_after=balance_after,
            reference=reference[:100],
        )
