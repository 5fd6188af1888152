"""
Tests for the catalog admin.
"""

import pytest
from django.contrib import admin
from django.contrib.auth.models import User

from catalog.models import Brand, ClassificationRuleRecord, ReconciliationRun


class TestAdminRegistration:

    def test_models_registered(self):
        for model in (Brand, ClassificationRuleRecord, ReconciliationRun):
            assert admin.site.is_registered(model)


@pytest.mark.django_db
class TestAdminPages:

    @pytest.fixture
    def admin_client(self, client):
        user = User.objects.create_superuser("admin", "admin@example.com", "password")
        client.force_login(user)
        return client

    def test_brand_changelist_shows_product_count(self, admin_client, make_product):
        brand = Brand.objects.create(name="Carlson")
        make_product("Carlson Fish Oil", brand=brand)

        response = admin_client.get("/admin/catalog/brand/")

        assert response.status_code == 200
        assert b"Carlson" in response.content

    def test_run_detail_renders_report(self, admin_client):
        run = ReconciliationRun.objects.create(kind="reconcile")
        run.complete({"entries_deleted": 4})

        response = admin_client.get(f"/admin/catalog/reconciliationrun/{run.id}/change/")

        assert response.status_code == 200
        assert b"entries_deleted" in response.content
