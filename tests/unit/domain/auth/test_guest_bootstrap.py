"""Unit tests for guest provisioning and its redirect helpers."""

from unittest.mock import AsyncMock

import pytest

from redflag.config import GuestConfig, SessionConfig
from redflag.domain.auth.model.user import User
from redflag.domain.auth.model.value import GUEST_LABEL_PATTERN, is_guest_label, make_guest_label
from redflag.domain.auth.service.guest import GuestService, guest_redirect_url, safe_return_path
from redflag.domain.auth.service.session import SessionResolver
from redflag.domain.auth.service.token import SessionTokenService


def _make_tokens() -> SessionTokenService:
    return SessionTokenService(_config=SessionConfig(secret="test-secret-key-256-bits-long-xx"))


class TestGuestLabel:
    def test_generated_label_matches_reserved_pattern(self) -> None:
        assert GUEST_LABEL_PATTERN.match(make_guest_label())

    def test_generated_labels_differ(self) -> None:
        assert len({make_guest_label() for _ in range(50)}) == 50

    @pytest.mark.parametrize(
        "label,expected",
        [
            ("guest-1", True),
            ("guest-1700000000000123456", True),
            ("guest-", False),
            ("guest-12a", False),
            ("Guest-12", False),
            ("guest@example.com", False),
            (None, False),
        ],
    )
    def test_is_guest_label(self, label: str | None, expected: bool) -> None:
        assert is_guest_label(label) is expected


class TestGuestRedirectUrl:
    def test_original_url_is_percent_encoded(self) -> None:
        assert (
            guest_redirect_url("/api/auth/guest", "/chat/42")
            == "/api/auth/guest?redirectUrl=%2Fchat%2F42"
        )

    def test_query_is_encoded_inside_parameter(self) -> None:
        assert (
            guest_redirect_url("/api/auth/guest", "/chat?a=1&b=2")
            == "/api/auth/guest?redirectUrl=%2Fchat%3Fa%3D1%26b%3D2"
        )


class TestSafeReturnPath:
    @pytest.mark.parametrize("target", ["/", "/chat/42", "/chat?a=1"])
    def test_same_site_paths_are_kept(self, target: str) -> None:
        assert safe_return_path(target) == target

    @pytest.mark.parametrize(
        "target",
        [
            None,
            "",
            "https://evil.example/",
            "//evil.example/path",
            "javascript:alert(1)",
            "chat/42",
            "/\\evil.example",
        ],
    )
    def test_unsafe_targets_fall_back(self, target: str | None) -> None:
        assert safe_return_path(target) == "/"

    @pytest.mark.parametrize("target", ["%2Fchat%2F42", "%2F%2Fevil.example"])
    def test_still_encoded_targets_are_not_decoded_again(self, target: str) -> None:
        assert safe_return_path(target) == "/"

    def test_custom_default(self) -> None:
        assert safe_return_path("https://evil.example", default="/home") == "/home"


class TestGuestService:
    @pytest.mark.asyncio
    async def test_provision_persists_guest_and_signs_session(self) -> None:
        repo = AsyncMock()
        tokens = _make_tokens()
        service = GuestService(_user_repo=repo, _tokens=tokens, _config=GuestConfig(expire_days=7))

        user, token = await service.provision()

        repo.save.assert_awaited_once()
        saved: User = repo.save.await_args.args[0]
        assert saved.id == user.id
        assert user.is_guest
        assert user.password_hash is None

        identity = SessionResolver(_tokens=tokens).resolve(token)
        assert identity is not None
        assert identity.user_id == user.id
        assert identity.is_guest

    @pytest.mark.asyncio
    async def test_each_provision_creates_a_new_guest(self) -> None:
        service = GuestService(_user_repo=AsyncMock(), _tokens=_make_tokens(), _config=GuestConfig())

        first, _ = await service.provision()
        second, _ = await service.provision()

        assert first.id != second.id
        assert first.email != second.email

    def test_session_max_age_uses_guest_lifetime(self) -> None:
        service = GuestService(
            _user_repo=AsyncMock(), _tokens=_make_tokens(), _config=GuestConfig(expire_days=3)
        )

        assert service.session_max_age == 3 * 86400
