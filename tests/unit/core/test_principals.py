"""Unit tests for Principal construction from request users."""

import pytest
from django.contrib.auth.models import AnonymousUser

from modules.core.authentication import Auth0User
from modules.core.principals import Principal

pytestmark = pytest.mark.unit


class TestFromUser:
    def test_anonymous_user(self):
        principal = Principal.from_user(AnonymousUser())

        assert principal == Principal.anonymous()
        assert not principal.is_authenticated

    def test_none(self):
        assert Principal.from_user(None) == Principal.anonymous()

    def test_django_user(self, buyer_user):
        principal = Principal.from_user(buyer_user)

        assert principal.subject == str(buyer_user.pk)
        assert not principal.is_privileged
        assert principal.is_authenticated

    def test_staff_user_is_privileged(self, staff_user):
        assert Principal.from_user(staff_user).is_privileged

    def test_auth0_user(self):
        user = Auth0User({"sub": "auth0|abc", "permissions": ["orders:read"]})

        principal = Principal.from_user(user)

        assert principal.subject == "auth0|abc"
        assert not principal.is_privileged

    def test_auth0_admin_permission(self, settings):
        user = Auth0User({"sub": "auth0|ops", "permissions": [settings.AUTH0_ADMIN_PERMISSION]})

        assert Principal.from_user(user).is_privileged


class TestSystemPrincipal:
    def test_privileged_without_subject(self):
        principal = Principal.system()

        assert principal.is_privileged
        assert principal.subject is None
        assert principal.is_authenticated
        assert str(principal) == "system"
