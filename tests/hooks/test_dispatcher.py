"""Tests for certhooks.hooks.dispatcher: dispatch()."""

from __future__ import annotations

import dataclasses
import logging

import pytest
from tests.hooks.conftest import make_certificate, make_hook, shell_hook

from certhooks.hooks.context import ChallengeContext
from certhooks.hooks.dispatcher import dispatch
from certhooks.hooks.errors import HookError, HookExecutionError, SpawnError, TemplateError
from certhooks.hooks.events import HookEvent
from certhooks.hooks.invoker import HookOutcome, HookResult

HTTP = HookEvent.CHALLENGE_HTTP_01
HTTP_CLEAN = HookEvent.CHALLENGE_HTTP_01_CLEAN


def _marker_hook(tmp_path, name, *, events=(HTTP,), script="exit 0", allow_failure=False):
    """A hook that leaves ``<tmp_path>/<name>.ran`` before running *script*."""
    marker = tmp_path / f"{name}.ran"
    return shell_hook(
        f"touch {marker}; {script}",
        name=name,
        events=events,
        allow_failure=allow_failure,
    )


class _RecordingInvoker:
    def __init__(self, fail_on: str | None = None) -> None:
        self.calls: list[tuple[object, str]] = []
        self.fail_on = fail_on

    def __call__(self, context, hook) -> HookResult:
        self.calls.append((context, hook.name))
        if hook.name == self.fail_on:
            raise HookExecutionError(hook.name, exit_code=1)
        return HookResult(hook.name, HookOutcome.SUCCESS, 0, 0.0)


# =========================================================================
# Selection
# =========================================================================


class TestSelection:
    def test_only_matching_hooks_run(self, tmp_path, challenge_ctx, fixed_environ):
        cert = make_certificate(
            _marker_hook(tmp_path, "publish", events=(HTTP,)),
            _marker_hook(tmp_path, "clean", events=(HTTP_CLEAN,)),
        )
        results = dispatch(cert, challenge_ctx, HTTP)
        assert [r.hook_name for r in results] == ["publish"]
        assert (tmp_path / "publish.ran").exists()
        assert not (tmp_path / "clean.ran").exists()

    def test_non_matching_hook_touches_no_output(self, tmp_path, challenge_ctx, fixed_environ):
        out = tmp_path / "clean.log"
        cert = make_certificate(
            shell_hook("printf x", name="clean", events=(HTTP_CLEAN,), stdout=str(out)),
        )
        assert dispatch(cert, challenge_ctx, HTTP) == []
        assert not out.exists()

    def test_hook_with_multiple_events(self, tmp_path, challenge_ctx, fixed_environ):
        hook = _marker_hook(tmp_path, "both", events=(HTTP, HTTP_CLEAN))
        cert = make_certificate(hook)
        assert len(dispatch(cert, challenge_ctx, HTTP_CLEAN)) == 1
        assert (tmp_path / "both.ran").exists()

    def test_hook_without_events_never_runs(self, challenge_ctx):
        invoker = _RecordingInvoker()
        cert = make_certificate(make_hook(name="dead", events=()))
        assert dispatch(cert, challenge_ctx, HTTP, invoker=invoker) == []
        assert invoker.calls == []

    def test_configured_order_preserved(self, challenge_ctx):
        invoker = _RecordingInvoker()
        cert = make_certificate(
            make_hook(name="c"),
            make_hook(name="a"),
            make_hook(name="b"),
        )
        dispatch(cert, challenge_ctx, HTTP, invoker=invoker)
        assert [name for _, name in invoker.calls] == ["c", "a", "b"]

    def test_same_context_passed_to_every_hook(self, challenge_ctx):
        invoker = _RecordingInvoker()
        cert = make_certificate(make_hook(name="a"), make_hook(name="b"))
        dispatch(cert, challenge_ctx, HTTP, invoker=invoker)
        assert all(ctx is challenge_ctx for ctx, _ in invoker.calls)

    def test_event_given_as_string(self, challenge_ctx):
        invoker = _RecordingInvoker()
        cert = make_certificate(make_hook(name="a"))
        dispatch(cert, challenge_ctx, "challenge-http-01", invoker=invoker)
        assert len(invoker.calls) == 1

    def test_no_hooks(self, challenge_ctx):
        assert dispatch(make_certificate(), challenge_ctx, HTTP) == []


# =========================================================================
# Fail-fast behaviour
# =========================================================================


class TestFailFast:
    def test_fatal_failure_stops_sequence(self, tmp_path, challenge_ctx, fixed_environ):
        cert = make_certificate(
            _marker_hook(tmp_path, "first"),
            _marker_hook(tmp_path, "failing", script="exit 1"),
            _marker_hook(tmp_path, "after"),
        )
        with pytest.raises(HookExecutionError) as exc_info:
            dispatch(cert, challenge_ctx, HTTP)
        assert exc_info.value.hook_name == "failing"
        assert (tmp_path / "first.ran").exists()
        assert (tmp_path / "failing.ran").exists()
        assert not (tmp_path / "after.ran").exists()

    def test_allowed_failure_continues(self, tmp_path, challenge_ctx, fixed_environ):
        cert = make_certificate(
            _marker_hook(tmp_path, "failing", script="exit 1", allow_failure=True),
            _marker_hook(tmp_path, "after"),
        )
        results = dispatch(cert, challenge_ctx, HTTP)
        assert [r.outcome for r in results] == [
            HookOutcome.ALLOWED_FAILURE,
            HookOutcome.SUCCESS,
        ]
        assert (tmp_path / "after.ran").exists()

    def test_template_error_stops_sequence(self, tmp_path, challenge_ctx, fixed_environ):
        cert = make_certificate(
            make_hook(name="bad", args=("{{ nope }}",), allow_failure=True),
            _marker_hook(tmp_path, "after"),
        )
        with pytest.raises(TemplateError):
            dispatch(cert, challenge_ctx, HTTP)
        assert not (tmp_path / "after.ran").exists()

    def test_spawn_error_stops_sequence(self, tmp_path, challenge_ctx, fixed_environ):
        cert = make_certificate(
            make_hook(name="missing", cmd=str(tmp_path / "nope"), allow_failure=True),
            _marker_hook(tmp_path, "after"),
        )
        with pytest.raises(SpawnError):
            dispatch(cert, challenge_ctx, HTTP)
        assert not (tmp_path / "after.ran").exists()

    def test_error_propagated_unchanged(self, challenge_ctx):
        invoker = _RecordingInvoker(fail_on="b")
        cert = make_certificate(make_hook(name="a"), make_hook(name="b"), make_hook(name="c"))
        with pytest.raises(HookExecutionError, match="Hook b: unrecoverable failure: code 1"):
            dispatch(cert, challenge_ctx, HTTP, invoker=invoker)
        assert [name for _, name in invoker.calls] == ["a", "b"]

    def test_failure_logged(self, challenge_ctx, caplog):
        invoker = _RecordingInvoker(fail_on="a")
        cert = make_certificate(make_hook(name="a"), make_hook(name="b"))
        with caplog.at_level(logging.ERROR, logger="certhooks.hooks.dispatcher"):
            with pytest.raises(HookExecutionError):
                dispatch(cert, challenge_ctx, HTTP, invoker=invoker)
        assert "skipping 1 remaining hook(s)" in caplog.text


# =========================================================================
# Argument validation
# =========================================================================


class TestValidation:
    def test_unknown_event(self, challenge_ctx):
        with pytest.raises(ValueError, match="Unknown hook event"):
            dispatch(make_certificate(), challenge_ctx, "certificate.issuance")

    def test_context_mismatch(self, post_operation_ctx):
        invoker = _RecordingInvoker()
        cert = make_certificate(make_hook(name="a"))
        with pytest.raises(TypeError, match="expects a challenge context"):
            dispatch(cert, post_operation_ctx, HTTP, invoker=invoker)
        assert invoker.calls == []

    def test_file_context_for_file_event(self, file_storage_ctx):
        invoker = _RecordingInvoker()
        cert = make_certificate(make_hook(name="a", events=(HookEvent.FILE_POST_CREATE,)))
        dispatch(cert, file_storage_ctx, HookEvent.FILE_POST_CREATE, invoker=invoker)
        assert len(invoker.calls) == 1


# =========================================================================
# End to end
# =========================================================================


class TestEndToEnd:
    def test_publish_and_clean(self, tmp_path, fixed_environ):
        webroot = tmp_path / "webroot"
        webroot.mkdir()
        publish = make_hook(
            name="publish",
            events=(HTTP,),
            args=("-c", f'cat > "{webroot}/$1"', "sh", "{{ file_name }}"),
            stdin="{{ proof }}",
        )
        clean = make_hook(
            name="clean",
            events=(HTTP_CLEAN,),
            args=("-c", f'rm "{webroot}/$1"', "sh", "{{ file_name }}"),
        )
        cert = make_certificate(publish, clean)

        ctx = ChallengeContext(
            domain="example.com", challenge="http-01", file_name="tok", proof="tok.thumb"
        )
        dispatch(cert, ctx, HTTP)
        assert (webroot / "tok").read_text() == "tok.thumb"

        clean_ctx = dataclasses.replace(ctx, is_clean_hook=True)
        dispatch(cert, clean_ctx, HTTP_CLEAN)
        assert not (webroot / "tok").exists()


class TestUnusableContextData:
    @pytest.mark.parametrize(
        "hook_kw",
        [
            {"cmd": "/bin/echo", "args": ("{{ domain }}",)},
            {"cmd": "/bin/true", "stdout": "/tmp/{{ domain }}.log"},
        ],
    )
    def test_nul_byte_raises_hook_error(self, fixed_environ, hook_kw):
        ctx = ChallengeContext(domain="a\x00b", challenge="http-01", file_name="t", proof="p")
        cert = make_certificate(make_hook(name="publish", **hook_kw))
        with pytest.raises(HookError):
            dispatch(cert, ctx, HookEvent.CHALLENGE_HTTP_01)
