"""
Tests for per-user push delivery and dead-token cleanup.
"""

from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from services.notification_service import NotificationService
from services.token_service import TokenService

NOT_REGISTERED = "messaging/registration-token-not-registered"


class TestNotifyUser:
    """Tests for NotificationService.notify_user"""

    @pytest.mark.asyncio
    async def test_sends_to_every_device(self, db_session, make_user, fake_gateway) -> None:
        """One gateway call covers all of the user's tokens."""
        make_user("u1", fcm_token="t1", fcm_tokens=["t1", "t2"])

        result = await NotificationService.notify_user(
            db_session, fake_gateway, "u1", "Title", "Body", {"type": "dm", "n": 1}
        )

        assert len(fake_gateway.calls) == 1
        assert fake_gateway.calls[0]["tokens"] == ["t1", "t2"]
        assert fake_gateway.calls[0]["data"] == {"type": "dm", "n": "1"}
        assert result.attempted == 2
        assert result.succeeded == 2
        assert result.side_effect_failures == []

    @pytest.mark.asyncio
    async def test_user_without_tokens_is_skipped(
        self, db_session, make_user, fake_gateway
    ) -> None:
        make_user("u1")

        result = await NotificationService.notify_user(
            db_session, fake_gateway, "u1", "Title", "Body"
        )

        assert result.skipped
        assert fake_gateway.calls == []

    @pytest.mark.asyncio
    async def test_dead_tokens_removed_from_owner_only(
        self, db_session, make_user, fake_gateway
    ) -> None:
        """Dead token is pruned from the recipient; another user's copy stays."""
        owner = make_user("u1", fcm_tokens=["good", "dead"])
        other = make_user("u2", fcm_tokens=["dead"])
        fake_gateway.errors = {"dead": NOT_REGISTERED}

        result = await NotificationService.notify_user(
            db_session, fake_gateway, "u1", "Title", "Body"
        )

        db_session.refresh(owner)
        db_session.refresh(other)
        assert result.invalidated_tokens == ["dead"]
        assert owner.fcm_tokens == ["good"]
        assert other.fcm_tokens == ["dead"]

    @pytest.mark.asyncio
    async def test_transient_errors_keep_tokens(
        self, db_session, make_user, fake_gateway
    ) -> None:
        """Only dead-token codes trigger cleanup."""
        user = make_user("u1", fcm_tokens=["t1"])
        fake_gateway.errors = {"t1": "messaging/quota-exceeded"}

        result = await NotificationService.notify_user(
            db_session, fake_gateway, "u1", "Title", "Body"
        )

        db_session.refresh(user)
        assert result.succeeded == 0
        assert result.invalidated_tokens == []
        assert user.fcm_tokens == ["t1"]

    @pytest.mark.asyncio
    async def test_cleanup_failure_is_reported_not_raised(
        self, db_session, make_user, fake_gateway
    ) -> None:
        make_user("u1", fcm_tokens=["dead"])
        fake_gateway.errors = {"dead": NOT_REGISTERED}

        with patch(
            "services.notification_service.TokenService.invalidate",
            side_effect=RuntimeError("write failed"),
        ):
            result = await NotificationService.notify_user(
                db_session, fake_gateway, "u1", "Title", "Body"
            )

        assert result.attempted == 1
        assert result.invalidated_tokens == []
        assert [f.operation for f in result.side_effect_failures] == ["token_cleanup"]

    @pytest.mark.asyncio
    async def test_gateway_exception_is_absorbed(
        self, db_session, make_user, fake_gateway
    ) -> None:
        user = make_user("u1", fcm_tokens=["t1", "t2"])
        fake_gateway.raise_error = RuntimeError("gateway down")

        result = await NotificationService.notify_user(
            db_session, fake_gateway, "u1", "Title", "Body"
        )

        db_session.refresh(user)
        assert result.succeeded == 0
        assert all(o.error_code == "messaging/internal" for o in result.outcomes)
        assert result.side_effect_failures[0].operation == "delivery"
        assert user.fcm_tokens == ["t1", "t2"]


class TestFanOut:
    """Tests for NotificationService.fan_out"""

    @pytest.mark.asyncio
    async def test_independent_recipients(self, db_session, make_user, fake_gateway) -> None:
        """A recipient without devices does not stop the others."""
        make_user("u1", fcm_tokens=["a"])
        make_user("u2")
        make_user("u3", fcm_tokens=["c"])

        result = await NotificationService.fan_out(
            db_session, fake_gateway, ["u1", "u2", "u3"], "T", "B", {}
        )

        assert result.recipients == ["u1", "u2", "u3"]
        assert sorted(fake_gateway.sent_tokens) == ["a", "c"]
        assert result.summary()["succeeded"] == 2

    @pytest.mark.asyncio
    async def test_no_recipients(self, db_session, fake_gateway) -> None:
        result = await NotificationService.fan_out(db_session, fake_gateway, [], "T", "B")

        assert result.recipients == []
        assert fake_gateway.calls == []

    @pytest.mark.asyncio
    async def test_token_lookup_failure_is_per_recipient(
        self, db_session, make_user, fake_gateway
    ) -> None:
        """A store error for one recipient is reported and the rest still deliver."""
        make_user("u2", fcm_tokens=["b"])
        make_user("u3", fcm_tokens=["c"])
        resolve_tokens = TokenService.resolve_tokens

        def flaky_lookup(db, user_id):
            if user_id == "u3":
                raise OperationalError("SELECT", {}, Exception("db down"))
            return resolve_tokens(db, user_id)

        with patch(
            "services.notification_service.TokenService.resolve_tokens",
            side_effect=flaky_lookup,
        ):
            result = await NotificationService.fan_out(
                db_session, fake_gateway, ["u2", "u3"], "T", "B"
            )

        assert result.recipients == ["u2", "u3"]
        assert fake_gateway.sent_tokens == ["b"]
        assert [(f.operation, f.target) for f in result.side_effect_failures] == [
            ("token_lookup", "u3")
        ]
