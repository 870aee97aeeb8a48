from decimal import Decimal

from django.core.files.uploadedfile import SimpleUploadedFile
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from backend.apps.products.models import Product
from tests.factories import AdminFactory, LicenseKeyFactory, ProductFactory, PromoCodeFactory, UserFactory


class ProductAPITests(APITestCase):

    def setUp(self):
        self.user = UserFactory()
        self.admin = AdminFactory()
        self.product = ProductFactory(name="Photo Editor")
        self.hidden = ProductFactory(name="Retired Tool", is_active=False)

    def test_public_list_hides_inactive_products(self):
        response = self.client.get(reverse('product-list'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        body = response.json()
        self.assertEqual(body['status'], 'success')
        names = [p['name'] for p in body['data']]
        self.assertIn("Photo Editor", names)
        self.assertNotIn("Retired Tool", names)

    def test_admin_sees_inactive_products(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get(reverse('product-list'))
        names = [p['name'] for p in response.json()['data']]
        self.assertIn("Retired Tool", names)

    def test_detail(self):
        response = self.client.get(reverse('product-detail', args=[self.product.id]))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['data']['id'], str(self.product.id))

    def test_filter_by_name(self):
        ProductFactory(name="Video Suite")
        response = self.client.get(reverse('product-list'), {'name': 'video'})
        names = [p['name'] for p in response.json()['data']]
        self.assertEqual(names, ["Video Suite"])

    def test_non_admin_cannot_create(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.post(reverse('product-list'), {'name': 'X', 'price_1_day': '1.00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.json()['status'], 'error')

    def test_create_requires_name_and_day_price(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(reverse('product-list'), {'name': 'No Price'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()['message'], "Product Name and at least 1 Day Price are required.")

    def test_create_with_camel_case_and_overrides(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(reverse('product-list'), {
            'name': 'Audio Pro',
            'price1Day': '1.50',
            'priceLifetime': '40.00',
            'trialEnabled': True,
            'trialDays': 3,
            'currencyPrices': {'gbp': {'lifetime': 30}},
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        product = Product.objects.get(name='Audio Pro')
        self.assertEqual(product.price_1_day, Decimal("1.50"))
        self.assertEqual(product.created_by, self.admin)
        self.assertEqual(product.currency_prices, {'GBP': {'lifetime': '30'}})
        self.assertEqual(response.json()['data']['trial_plan'], 'trial_3_days')

    def test_create_rejects_unknown_override_currency(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.post(reverse('product-list'), {
            'name': 'Bad', 'price_1_day': '1.00', 'currency_prices': {'XXX': {'lifetime': 3}},
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_with_image_upload(self):
        self.client.force_authenticate(user=self.admin)
        image = SimpleUploadedFile("cover.png", b"\x89PNG data", content_type="image/png")

        response = self.client.post(reverse('product-list'), {
            'name': 'With Image', 'price_1_day': '2.00', 'image': image,
        }, format='multipart')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn('products/', response.json()['data']['image_url'])
        self.assertNotIn('image', response.json()['data'])

    def test_partial_update(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.patch(
            reverse('product-detail', args=[self.product.id]), {'priceLifetime': '120.00'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.product.refresh_from_db()
        self.assertEqual(self.product.price_lifetime, Decimal("120.00"))

    def test_delete_unused_product(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.delete(reverse('product-detail', args=[self.product.id]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()['message'], 'Product deleted successfully')
        self.assertFalse(Product.objects.filter(pk=self.product.pk).exists())

    def test_delete_product_with_keys_is_refused(self):
        LicenseKeyFactory(product=self.product)
        self.client.force_authenticate(user=self.admin)

        response = self.client.delete(reverse('product-detail', args=[self.product.id]))

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()['code'], 'product_in_use')
        self.assertTrue(Product.objects.filter(pk=self.product.pk).exists())


class ProductQuoteAPITests(APITestCase):

    def setUp(self):
        self.user = UserFactory(currency="GBP")
        self.product = ProductFactory(currency_prices={"GBP": {"7_days": "8.00"}})
        self.url = reverse('product-quote', args=[self.product.id])

    def test_quote_requires_login(self):
        response = self.client.get(self.url, {'plan': '7_days'})
        self.assertIn(response.status_code, [status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN])

    def test_quote_defaults_to_user_currency(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.get(self.url, {'plan': '7_days'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.json()['data']
        self.assertEqual(data['currency'], 'GBP')
        self.assertEqual(data['final_price'], '8.00')

    def test_quote_with_promo(self):
        PromoCodeFactory(code="TENOFF", value=Decimal("10"))
        self.client.force_authenticate(user=self.user)

        response = self.client.get(self.url, {'plan': '30_days', 'currency': 'USD', 'promoCode': 'tenoff'})

        data = response.json()['data']
        self.assertEqual(data['base_price'], '25.00')
        self.assertEqual(data['discount_amount'], '2.50')
        self.assertEqual(data['final_price'], '22.50')
        self.assertEqual(data['promo_code'], 'TENOFF')

    def test_quote_rejects_trial_plan(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.get(self.url, {'plan': 'trial_1_day'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_quote_with_unknown_promo(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.get(self.url, {'plan': '7_days', 'promo_code': 'NOPE'})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()['code'], 'promo_invalid')
