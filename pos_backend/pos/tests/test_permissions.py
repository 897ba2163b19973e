from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient, APIRequestFactory

from organizations.models import Branch, Organization
from permissions.roles import (
    CAP_POS_CREDIT,
    CAP_POS_SELL,
    CAP_POS_VOID,
    HasCapability,
    effective_capabilities_for,
)

User = get_user_model()


class _View:
    def __init__(self, capability=None):
        self.required_capability = capability


class CapabilityTests(TestCase):
    """
    Tests for capability-based permissions.

    GUARANTEES:
    - Cashiers sell and hold with debt but cannot void
    - Managers and admins hold every POS capability
    - Views without a declared capability deny by default
    """

    def setUp(self):
        self.factory = APIRequestFactory()

        self.admin = User.objects.create_user(email="admin@example.com", password="pass", role="admin")
        self.manager = User.objects.create_user(email="manager@example.com", password="pass", role="manager")
        self.cashier = User.objects.create_user(email="cashier@example.com", password="pass", role="cashier")

    # --------------------------------------------------
    # Helpers
    # --------------------------------------------------

    def _allowed(self, user, capability):
        request = self.factory.get("/")
        request.user = user
        return HasCapability().has_permission(request, _View(capability))

    # --------------------------------------------------
    # ROLES
    # --------------------------------------------------

    def test_cashier_capabilities(self):
        self.assertTrue(self._allowed(self.cashier, CAP_POS_SELL))
        self.assertTrue(self._allowed(self.cashier, CAP_POS_CREDIT))
        self.assertFalse(self._allowed(self.cashier, CAP_POS_VOID))

    def test_manager_and_admin_capabilities(self):
        for user in (self.manager, self.admin):
            self.assertEqual(
                effective_capabilities_for(user),
                {CAP_POS_SELL, CAP_POS_CREDIT, CAP_POS_VOID},
            )

    def test_superuser_has_everything(self):
        root = User.objects.create_superuser(email="root@example.com", password="pass")
        root.role = "cashier"

        self.assertTrue(self._allowed(root, CAP_POS_VOID))

    def test_missing_capability_denies(self):
        self.assertFalse(self._allowed(self.admin, None))


class MeEndpointTests(TestCase):
    def test_me_returns_scope(self):
        organization = Organization.objects.create(name="Tienda Centro")
        branch = Branch.objects.create(organization=organization, name="Main")
        user = User.objects.create_user(
            email="cashier@example.com",
            password="pass",
            organization=organization,
            default_branch=branch,
        )

        client = APIClient()
        client.force_authenticate(user=user)
        res = client.get("/api/auth/me/")

        self.assertEqual(res.status_code, 200)
        self.assertEqual(str(res.data["organization_id"]), str(organization.id))
        self.assertEqual(str(res.data["default_branch_id"]), str(branch.id))
        self.assertEqual(res.data["role"], "cashier")
