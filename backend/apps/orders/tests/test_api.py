from decimal import Decimal

from django.core.files.uploadedfile import SimpleUploadedFile
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from backend.apps.orders.models import Order
from backend.apps.products.models import Plan
from tests.factories import AdminFactory, LicenseKeyFactory, OrderFactory, ProductFactory, UserFactory


class CustomerOrderAPITests(APITestCase):

    def setUp(self):
        self.user = UserFactory(balance=Decimal("50.00"))
        self.product = ProductFactory(trial_enabled=True, trial_days=1)
        self.client.force_authenticate(user=self.user)

    def test_manual_order_with_screenshot(self):
        screenshot = SimpleUploadedFile("paid.jpg", b"\xff\xd8 jpeg", content_type="image/jpeg")

        response = self.client.post(reverse('order-create'), {
            'productId': str(self.product.pk),
            'plan': '30_days',
            'paymentMethod': 'bank',
            'transactionId': 'BANK-77',
            'payment_screenshot': screenshot,
        }, format='multipart')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        body = response.json()
        self.assertEqual(body['message'], 'Order placed')
        self.assertEqual(body['data']['status'], 'pending')
        self.assertEqual(body['data']['payment_channel'], 'bank')
        self.assertEqual(body['data']['transaction_id'], 'BANK-77')
        self.assertIsNone(body['data']['license_key'])
        self.assertIn('orders/', body['data']['payment_proof_url'])

    def test_manual_order_rejects_unknown_plan(self):
        response = self.client.post(reverse('order-create'), {
            'product_id': str(self.product.pk), 'plan': 'forever',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()['message'], 'plan: Invalid Plan')

    def test_wallet_purchase(self):
        self.user.balance = Decimal("120.00")
        self.user.save()
        LicenseKeyFactory(product=self.product, plan=Plan.LIFETIME, key="LIFETIME-KEY-1")

        response = self.client.post(reverse('order-wallet'), {
            'productId': str(self.product.pk), 'plan': 'lifetime',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        body = response.json()
        self.assertEqual(body['message'], 'Purchase successful')
        self.assertEqual(body['data']['status'], 'completed')
        self.assertEqual(body['data']['license_key'], 'LIFETIME-KEY-1')
        self.assertEqual(body['data']['product']['name'], self.product.name)

    def test_wallet_purchase_out_of_stock(self):
        response = self.client.post(reverse('order-wallet'), {
            'productId': str(self.product.pk), 'plan': '1_day',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        body = response.json()
        self.assertEqual(body['status'], 'error')
        self.assertEqual(body['code'], 'out_of_stock')
        self.assertEqual(body['message'], 'Out of Stock! No unused keys found for 1_day.')

    def test_wallet_purchase_insufficient_balance(self):
        LicenseKeyFactory(product=self.product, plan=Plan.LIFETIME)
        self.user.balance = Decimal("1.00")
        self.user.save()

        response = self.client.post(reverse('order-wallet'), {
            'productId': str(self.product.pk), 'plan': 'lifetime',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()['code'], 'insufficient_balance')

    def test_claim_trial_twice(self):
        LicenseKeyFactory(product=self.product, plan=Plan.TRIAL_1_DAY)
        LicenseKeyFactory(product=self.product, plan=Plan.TRIAL_1_DAY)
        url = reverse('order-claim-trial')

        response = self.client.post(url, {'productId': str(self.product.pk)}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['message'], 'Free trial claimed')

        response = self.client.post(url, {'productId': str(self.product.pk)}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()['code'], 'trial_already_claimed')

    def test_my_orders_hides_pending_keys_and_other_users(self):
        OrderFactory(user=self.user, product=self.product)
        OrderFactory()

        response = self.client.get(reverse('order-my-orders'))

        data = response.json()['data']
        self.assertEqual(len(data), 1)
        self.assertIsNone(data[0]['license_key'])

    def test_requires_authentication(self):
        self.client.force_authenticate(user=None)
        response = self.client.get(reverse('order-my-orders'))
        self.assertIn(response.status_code, [status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN])


class AdminOrderAPITests(APITestCase):

    def setUp(self):
        self.admin = AdminFactory()
        self.order = OrderFactory(plan=Plan.SEVEN_DAYS)
        self.client.force_authenticate(user=self.admin)

    def test_list_all_with_status_filter(self):
        OrderFactory(status=Order.Status.REJECTED)

        response = self.client.get(reverse('order-admin-all'), {'status': 'pending'})

        data = response.json()['data']
        self.assertEqual(len(data), 1)
        self.assertEqual(data[0]['user_email'], self.order.user.email)

    def test_customers_cannot_list_all(self):
        self.client.force_authenticate(user=self.order.user)
        response = self.client.get(reverse('order-admin-all'))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_complete_order(self):
        LicenseKeyFactory(product=self.order.product, plan=Plan.SEVEN_DAYS, key="ADMIN-KEY-1")

        response = self.client.patch(
            reverse('order-status', args=[self.order.pk]), {'status': 'completed'}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['message'], 'Order completed')
        self.assertEqual(response.json()['data']['license_key'], 'ADMIN-KEY-1')

    def test_complete_without_stock(self):
        response = self.client.patch(
            reverse('order-status', args=[self.order.pk]), {'status': 'completed'}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()['message'], "No stock available for '7_days' plan!")

    def test_reject_order(self):
        response = self.client.patch(
            reverse('order-status', args=[self.order.pk]), {'status': 'rejected'}, format='json'
        )
        self.assertEqual(response.json()['message'], 'Order rejected')

    def test_pending_is_not_a_valid_target(self):
        response = self.client.patch(
            reverse('order-status', args=[self.order.pk]), {'status': 'pending'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
