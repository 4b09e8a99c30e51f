"""Tests for the request-scoped context and session helpers."""

import pytest

from atomic.context import SESSION_CONTEXT_KEY, Context, ContextKey
from atomic.core.errors import (
    ContextCancelledError,
    DeadlineExceededError,
    SessionTypeError,
)
from atomic.session import Session, attach_session, session_from_context


class TestContextValues:
    def test_background_is_empty(self):
        ctx = Context.background()

        assert ctx.value(SESSION_CONTEXT_KEY) is None
        assert ctx.value("anything", "default") == "default"
        assert not ctx.cancelled
        assert ctx.deadline is None

    def test_with_value_derives_child(self):
        parent = Context.background()
        key = ContextKey("user")

        child = parent.with_value(key, "alice")

        assert child.value(key) == "alice"
        assert parent.value(key) is None

    def test_inner_value_shadows_outer(self):
        key = ContextKey("user")
        ctx = Context.background().with_value(key, "alice").with_value(key, "bob")

        assert ctx.value(key) == "bob"

    def test_keys_compare_by_identity(self):
        """Test that equally named keys do not collide."""
        ctx = Context.background().with_value(ContextKey("session"), "foreign")

        assert ctx.value(SESSION_CONTEXT_KEY) is None

    def test_none_key_rejected(self):
        with pytest.raises(ValueError, match="cannot be None"):
            Context.background().with_value(None, 1)

    def test_branches_are_independent(self):
        key = ContextKey("branch")
        root = Context.background()

        left = root.with_value(key, "left")
        right = root.with_value(key, "right")

        assert left.value(key) == "left"
        assert right.value(key) == "right"


class TestCancellation:
    def test_cancel_marks_descendants(self):
        parent, cancel = Context.background().with_cancel()
        child = parent.with_value(ContextKey("x"), 1)

        assert not child.cancelled
        cancel()

        assert parent.cancelled
        assert child.cancelled
        with pytest.raises(ContextCancelledError):
            child.raise_if_done()

    def test_cancel_does_not_affect_parent(self):
        root = Context.background()
        child, cancel = root.with_cancel()

        cancel()

        assert child.cancelled
        assert not root.cancelled
        root.raise_if_done()

    def test_expired_deadline(self):
        ctx = Context.background().with_timeout(-1)

        with pytest.raises(DeadlineExceededError) as exc_info:
            ctx.raise_if_done()

        assert isinstance(exc_info.value, TimeoutError)

    def test_future_deadline_not_done(self):
        ctx = Context.background().with_timeout(60)

        ctx.raise_if_done()
        assert ctx.deadline is not None

    def test_earliest_deadline_wins(self):
        outer = Context.background().with_timeout(1)
        inner = outer.with_timeout(3600)

        assert inner.deadline == outer.deadline


class TestSessionHelpers:
    def test_attach_and_find_session(self):
        remote = object()
        ctx = attach_session(Context.background(), remote)

        session = session_from_context(ctx)

        assert isinstance(session, Session)
        assert session.remote is remote

    def test_no_session(self):
        assert session_from_context(Context.background()) is None

    def test_foreign_value_rejected(self):
        ctx = Context.background().with_value(SESSION_CONTEXT_KEY, {"tx": 1})

        with pytest.raises(SessionTypeError, match="cannot use dict as Session"):
            session_from_context(ctx)

    def test_remote_type_checked(self):
        ctx = attach_session(Context.background(), "a string handle")

        with pytest.raises(SessionTypeError, match="cannot use str"):
            session_from_context(ctx, remote_type=int)

    def test_session_is_immutable(self):
        session = Session(remote=1)

        with pytest.raises(AttributeError):
            session.remote = 2
