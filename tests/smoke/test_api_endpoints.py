# FILE: tests/smoke/test_api_endpoints.py
from django.urls import reverse, NoReverseMatch
from rest_framework import status
from rest_framework.test import APITestCase
from tests.factories import AdminFactory, ProductFactory, UserFactory


class SmokeTests(APITestCase):
    def setUp(self):
        # Regular customer for most endpoints
        self.user = UserFactory()
        self.admin = AdminFactory()
        self.product = ProductFactory()
        self.client.force_authenticate(user=self.user)

    def _url(self, name, *args):
        try:
            return reverse(name, args=args)
        except NoReverseMatch:
            self.skipTest(f"URL '{name}' not configured")

    def test_schema(self):
        """The OpenAPI schema should render."""
        response = self.client.get(self._url('schema'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_product_list(self):
        response = self.client.get(self._url('product-list'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['status'], 'success')

    def test_product_detail(self):
        response = self.client.get(self._url('product-detail', self.product.id))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['data']['id'], str(self.product.id))

    def test_customer_endpoints(self):
        for name in ('user-me', 'order-my-orders', 'balance-my-requests', 'reset-my-requests'):
            with self.subTest(name=name):
                response = self.client.get(self._url(name))
                self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_admin_endpoints(self):
        self.client.force_authenticate(user=self.admin)
        for name in ('order-admin-all', 'balance-admin-all', 'reset-admin-all', 'license-list', 'promo-list'):
            with self.subTest(name=name):
                response = self.client.get(self._url(name))
                self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_admin_endpoints_refuse_customers(self):
        for name in ('order-admin-all', 'license-list', 'promo-list'):
            with self.subTest(name=name):
                response = self.client.get(self._url(name))
                self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_unauthenticated_access(self):
        """Authenticated-only endpoints should reject unauthenticated requests."""
        self.client.force_authenticate(user=None)
        response = self.client.get(self._url('order-my-orders'))
        self.assertIn(response.status_code, [status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN])
