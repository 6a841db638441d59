"""
Health Check Tests.
"""

from unittest.mock import patch

import pytest
from django.urls import reverse


@pytest.mark.django_db
class TestHealthCheck:

    def test_healthy(self, client):
        response = client.get(reverse('health'))

        assert response.status_code == 200
        body = response.json()
        assert body['status'] == 'healthy'
        assert body['database'] == 'connected'
        assert body['cache'] == 'connected'

    def test_cache_miss_degrades(self, client):
        with patch('django.core.cache.cache.get', return_value=None):
            response = client.get(reverse('health'))

        assert response.status_code == 503
        assert response.json()['cache'] == 'error'
