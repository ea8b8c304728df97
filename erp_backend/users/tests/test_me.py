from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from permissions.roles import (
    ALL_CAPABILITIES,
    CAP_RECEIPTS_CREATE,
    CAP_RECEIPTS_VIEW,
    CAP_RECEIPTS_VOID,
)

User = get_user_model()


class MeEndpointTests(APITestCase):
    url = "/api/auth/me/"

    def setUp(self):
        self.client = APIClient()

    def test_cashier_capabilities(self):
        cashier = User.objects.create_user(email="caja@example.com", password="pass", role="cashier")
        self.client.force_authenticate(user=cashier)

        res = self.client.get(self.url)

        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["username"], "caja")
        self.assertEqual(res.data["capabilities"], sorted([CAP_RECEIPTS_CREATE, CAP_RECEIPTS_VIEW]))
        self.assertNotIn(CAP_RECEIPTS_VOID, res.data["capabilities"])

    def test_superuser_gets_everything(self):
        root = User.objects.create_superuser(email="root@example.com", password="pass")
        self.client.force_authenticate(user=root)

        res = self.client.get(self.url)
        self.assertEqual(set(res.data["capabilities"]), set(ALL_CAPABILITIES))

    def test_requires_authentication(self):
        res = self.client.get(self.url)
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)
