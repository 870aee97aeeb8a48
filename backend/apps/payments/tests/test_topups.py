from decimal import Decimal
from unittest import mock

from django.core import mail
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.exceptions import NotFound
from rest_framework.test import APITestCase

from backend.apps.payments.ledger import WalletLedger
from backend.apps.payments.models import LedgerEntry, TopUpRequest
from backend.apps.payments.services import TopUpService
from backend.core.exceptions import RequestAlreadyProcessed
from tests.factories import AdminFactory, TopUpRequestFactory, UserFactory


class TopUpServiceTests(TestCase):

    def setUp(self):
        self.service = TopUpService()
        self.admin = AdminFactory()
        self.user = UserFactory(balance=Decimal("5.00"))

    def test_create_request_is_pending(self):
        topup = self.service.create_request(
            user=self.user, amount=Decimal("15.00"), payment_method="bank",
            transaction_id="TX-1", currency="usd",
        )
        self.assertEqual(topup.status, TopUpRequest.Status.PENDING)
        self.assertEqual(topup.currency, "USD")
        self.assertEqual(topup.proof_url, "")

    def test_approve_credits_once(self):
        topup = TopUpRequestFactory(user=self.user, amount=Decimal("20.00"))

        with self.captureOnCommitCallbacks(execute=True):
            approved = self.service.approve(topup.pk, reviewer=self.admin, notes="ok")

        self.assertEqual(approved.status, TopUpRequest.Status.APPROVED)
        self.assertEqual(approved.credited_amount, Decimal("20.00"))
        self.assertEqual(approved.reviewed_by, self.admin)
        self.user.refresh_from_db()
        self.assertEqual(self.user.balance, Decimal("25.00"))
        self.assertEqual(LedgerEntry.objects.get(user=self.user).reference, f"topup:{topup.pk}")
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].subject, "Balance top-up approved")

        with self.assertRaises(RequestAlreadyProcessed) as ctx:
            self.service.approve(topup.pk, reviewer=self.admin)
        self.assertEqual(str(ctx.exception.detail), "Already approved")

        self.user.refresh_from_db()
        self.assertEqual(self.user.balance, Decimal("25.00"))
        self.assertEqual(LedgerEntry.objects.filter(user=self.user).count(), 1)

    def test_approve_converts_foreign_amount_to_usd(self):
        topup = TopUpRequestFactory(user=self.user, amount=Decimal("556.00"), currency="PKR")
        approved = self.service.approve(topup.pk, reviewer=self.admin)

        self.assertEqual(approved.credited_amount, Decimal("2.00"))
        self.user.refresh_from_db()
        self.assertEqual(self.user.balance, Decimal("7.00"))

    def test_approve_credits_through_the_ledger_conversion(self):
        ledger = WalletLedger(exchange_rates={"GBP": "0.5"})
        service = TopUpService(ledger=ledger)
        topup = TopUpRequestFactory(user=self.user, amount=Decimal("4.00"), currency="GBP")

        with mock.patch.object(ledger, 'credit_from_foreign_amount', wraps=ledger.credit_from_foreign_amount) as credit:
            approved = service.approve(topup.pk, reviewer=self.admin)

        credit.assert_called_once_with(
            self.user.pk, Decimal("4.00"), "GBP", reference=f"topup:{topup.pk}"
        )
        self.assertEqual(approved.credited_amount, Decimal("8.00"))
        self.user.refresh_from_db()
        self.assertEqual(self.user.balance, Decimal("13.00"))

    def test_rejected_request_cannot_be_approved(self):
        topup = TopUpRequestFactory(user=self.user)
        self.service.reject(topup.pk, reviewer=self.admin, notes="no payment found")

        with self.assertRaises(RequestAlreadyProcessed) as ctx:
            self.service.approve(topup.pk, reviewer=self.admin)
        self.assertEqual(str(ctx.exception.detail), "Request already rejected")
        self.user.refresh_from_db()
        self.assertEqual(self.user.balance, Decimal("5.00"))

    def test_reject_leaves_balance_alone(self):
        topup = TopUpRequestFactory(user=self.user)

        with self.captureOnCommitCallbacks(execute=True):
            rejected = self.service.reject(topup.pk, reviewer=self.admin, notes="nope")

        self.assertEqual(rejected.status, TopUpRequest.Status.REJECTED)
        self.assertEqual(rejected.review_notes, "nope")
        self.assertIsNone(rejected.credited_amount)
        self.assertEqual(mail.outbox[0].subject, "Balance top-up rejected")
        self.assertFalse(LedgerEntry.objects.exists())

    def test_reject_twice(self):
        topup = TopUpRequestFactory(user=self.user)
        self.service.reject(topup.pk)
        with self.assertRaises(RequestAlreadyProcessed):
            self.service.reject(topup.pk)

    def test_unknown_request(self):
        import uuid
        with self.assertRaises(NotFound):
            self.service.approve(uuid.uuid4())
        with self.assertRaises(NotFound):
            self.service.reject(uuid.uuid4())

    def test_notification_failure_does_not_undo_approval(self):
        topup = TopUpRequestFactory(user=self.user)
        with mock.patch(
            'backend.apps.notifications.services.send_email_notification.delay',
            side_effect=ConnectionError("broker down"),
        ):
            with self.captureOnCommitCallbacks(execute=True):
                self.service.approve(topup.pk, reviewer=self.admin)

        topup.refresh_from_db()
        self.assertEqual(topup.status, TopUpRequest.Status.APPROVED)
        self.user.refresh_from_db()
        self.assertEqual(self.user.balance, Decimal("25.00"))


class TopUpAPITests(APITestCase):

    def setUp(self):
        self.user = UserFactory()
        self.admin = AdminFactory()

    def test_submit_request_with_screenshot(self):
        self.client.force_authenticate(user=self.user)
        screenshot = SimpleUploadedFile("proof me.png", b"\x89PNG fake", content_type="image/png")

        response = self.client.post(reverse('balance-request'), {
            'amount': '12.50',
            'currency': 'GBP',
            'paymentMethod': 'bank',
            'transactionId': 'TX-42',
            'payment_screenshot': screenshot,
        }, format='multipart')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        body = response.json()
        self.assertEqual(body['status'], 'success')
        self.assertEqual(body['message'], 'Balance request submitted successfully')
        self.assertEqual(body['data']['status'], 'pending')
        self.assertEqual(body['data']['currency'], 'GBP')
        self.assertIn('balance/', body['data']['proof_url'])
        self.assertIn('proofme.png', body['data']['proof_url'])

    def test_submit_rejects_unsupported_file_type(self):
        self.client.force_authenticate(user=self.user)
        upload = SimpleUploadedFile("run.exe", b"MZ", content_type="application/octet-stream")

        response = self.client.post(reverse('balance-request'), {
            'amount': '10', 'payment_method': 'bank', 'transaction_id': 'TX', 'payment_screenshot': upload,
        }, format='multipart')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()['status'], 'error')
        self.assertFalse(TopUpRequest.objects.exists())

    def test_submit_rejects_non_positive_amount(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.post(reverse('balance-request'), {
            'amount': '0', 'payment_method': 'bank', 'transaction_id': 'TX',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_my_requests_only_lists_own(self):
        TopUpRequestFactory(user=self.user)
        TopUpRequestFactory()
        self.client.force_authenticate(user=self.user)

        response = self.client.get(reverse('balance-my-requests'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['status'], 'success')
        self.assertEqual(len(response.json()['data']), 1)

    def test_admin_list_is_admin_only(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.get(reverse('balance-admin-all'))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_list_filters_by_status(self):
        TopUpRequestFactory(user=self.user)
        TopUpRequestFactory(status=TopUpRequest.Status.REJECTED)
        self.client.force_authenticate(user=self.admin)

        response = self.client.get(reverse('balance-admin-all'), {'status': 'pending'})

        data = response.json()['data']
        self.assertEqual(len(data), 1)
        self.assertEqual(data[0]['user_email'], self.user.email)

    def test_approve_and_reapprove(self):
        topup = TopUpRequestFactory(user=self.user, amount=Decimal("8.00"))
        self.client.force_authenticate(user=self.admin)
        url = reverse('balance-approve', args=[topup.pk])

        response = self.client.patch(url, {'notes': 'verified'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['message'], 'Request approved')

        response = self.client.patch(url, {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()['code'], 'already_processed')
        self.assertEqual(response.json()['message'], 'Already approved')

        self.user.refresh_from_db()
        self.assertEqual(self.user.balance, Decimal("8.00"))

    def test_reject_endpoint(self):
        topup = TopUpRequestFactory(user=self.user)
        self.client.force_authenticate(user=self.admin)

        response = self.client.patch(reverse('balance-reject', args=[topup.pk]), {'notes': 'x'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['message'], 'Request rejected')
        self.assertEqual(response.json()['data']['status'], 'rejected')
