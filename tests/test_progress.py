"""
Tests for mode selection, ETA and the indicator lifecycle in progresspack/progress.py
"""

import pytest

from progresspack.progress import (
    DEFAULT_TOTAL,
    Mode,
    Phase,
    ProgressIndicator,
    PromptCancelled,
    select_mode,
)


class TestModeSelection:
    """Determinate vs. indeterminate"""

    @pytest.mark.parametrize("total", [None, 0, -5, "abc", float("nan")])
    def test_missing_or_invalid_total_is_indeterminate(self, total):
        mode, normalized = select_mode(total)
        assert mode is Mode.INDETERMINATE
        assert normalized == DEFAULT_TOTAL

    def test_positive_total_is_determinate(self):
        assert select_mode(50) == (Mode.DETERMINATE, 50)

    def test_no_total_starts_spinner_scheduler(self, make_indicator):
        spin = make_indicator(message="Processing data")
        assert spin.mode is Mode.INDETERMINATE
        assert spin.scheduler.started

    def test_determinate_has_no_scheduler_unless_animated(self, make_indicator):
        assert make_indicator(total=10).scheduler is None
        animated = make_indicator(total=10, animate=True)
        assert animated.mode is Mode.DETERMINATE
        assert animated.scheduler.started

    def test_total_update_changes_denominator_not_mode(self, make_indicator):
        bar = make_indicator(total=10)
        bar.update(total=40)
        assert bar.mode is Mode.DETERMINATE
        assert bar.state.total == 40

    @pytest.mark.parametrize("total", [0, -1, "many", None])
    def test_non_positive_total_update_ignored(self, make_indicator, total):
        bar = make_indicator(total=10)
        bar.update({"total": total})
        assert bar.state.total == 10

    def test_initial_value_and_status(self, make_indicator):
        bar = make_indicator(total=10, initial=4, status="warming up")
        assert bar.state.current == 4
        assert bar.state.status_text == "warming up"


class TestUpdate:
    """update() payload handling"""

    def test_number_sets_current(self, make_indicator):
        bar = make_indicator(total=10)
        bar.update(3)
        assert bar.state.current == 3

    def test_mapping_overwrites_present_fields_only(self, make_indicator):
        bar = make_indicator(message="Build", total=10, status="Init")
        bar.update({"value": 2})
        assert bar.state.status_text == "Init"
        assert bar.state.message == "Build"
        bar.update({"message": "Building", "status": "Compile"})
        assert bar.state.current == 2
        assert bar.state.message == "Building"
        assert bar.state.status_text == "Compile"

    def test_keyword_fields(self, make_indicator):
        bar = make_indicator(total=10)
        bar.update(value=6, status="Test")
        assert bar.state.current == 6
        assert bar.state.status_text == "Test"

    def test_malformed_payload_is_tolerated(self, make_indicator):
        bar = make_indicator(total=10)
        bar.update(4)
        bar.update({"value": "lots", "colour": "red"})
        bar.update("nonsense")
        assert bar.state.current == 4

    def test_timestamps(self, make_indicator, clock):
        bar = make_indicator(total=10)
        assert bar.state.start_time is None
        bar.update(1)
        clock.advance(250)
        bar.update(2)
        assert bar.state.start_time == 1000
        assert bar.state.last_update_time == 1250

    def test_update_renders_only_while_running(self, make_indicator):
        bar = make_indicator(total=10)
        bar.update(1)
        assert bar.render_count == 0
        bar.run()
        bar.update(2)
        assert bar.render_count == 2


class TestEta:
    """Rate-based time remaining"""

    def test_none_in_indeterminate_mode(self, make_indicator, clock):
        spin = make_indicator()
        spin.update(5)
        clock.advance(1000)
        spin.update(10)
        assert spin.get_eta() is None

    def test_none_before_first_update(self, make_indicator):
        assert make_indicator(total=10).get_eta() is None

    def test_none_when_current_is_zero(self, make_indicator, clock):
        bar = make_indicator(total=10)
        bar.update(0)
        clock.advance(1000)
        bar.update(0)
        assert bar.get_eta() is None

    def test_none_without_elapsed_time(self, make_indicator):
        bar = make_indicator(total=10)
        bar.update(5)
        assert bar.get_eta() is None

    def test_linear_extrapolation_from_first_update(self, make_indicator, clock):
        bar = make_indicator(total=100)
        bar.update(10)
        clock.advance(1000)
        bar.update(20)
        # 20 units in 1000ms -> 80 remaining at 0.02 units/ms
        assert bar.get_eta() == pytest.approx(4000)

    def test_eta_shown_only_when_positive(self, make_indicator, clock, plain):
        bar = make_indicator(total=10)
        bar.update(5)
        clock.advance(500)
        bar.update(10)
        assert bar.get_eta() == 0
        assert "ETA" not in plain(bar.render_bar())

    def test_eta_can_be_disabled(self, make_indicator, clock, plain):
        bar = make_indicator(total=100, show_eta=False)
        bar.update(10)
        clock.advance(1000)
        bar.update(20)
        assert "ETA" not in plain(bar.render_bar())


class TestLifecycle:
    """run / complete / cancel"""

    def test_run_resolves_with_final_value(self, make_indicator, plain):
        bar = make_indicator(total=50)
        future = bar.run()
        assert bar.phase is Phase.RUNNING
        bar.update(25)
        assert "50%" in plain(bar.render_bar())
        bar.update(50)
        bar.complete()
        assert future.result(timeout=1) == 50
        assert bar.phase is Phase.SUBMITTED
        assert bar.state.submitted

    def test_run_twice_returns_same_future(self, make_indicator):
        bar = make_indicator(total=5)
        future = bar.run()
        assert bar.run() is future
        assert bar.render_count == 1

    def test_complete_fills_determinate_bar(self, make_indicator):
        bar = make_indicator(total=50)
        bar.run()
        bar.update(10)
        assert bar.complete().result(timeout=1) == 50

    def test_complete_keeps_indeterminate_value(self, make_indicator):
        spin = make_indicator()
        spin.run()
        spin.update(7)
        assert spin.complete("Done!").result(timeout=1) == 7
        assert spin.state.message == "Done!"

    def test_updates_after_complete_are_inert(self, make_indicator):
        bar = make_indicator(total=50)
        bar.run()
        bar.complete()
        renders = bar.render_count
        bar.update({"value": 10, "status": "late", "message": "late"})
        assert bar.state.current == 50
        assert bar.state.status_text == ""
        assert bar.render_count == renders

    def test_complete_twice_is_noop(self, make_indicator):
        bar = make_indicator(total=5)
        future = bar.run()
        bar.complete()
        renders = bar.render_count
        assert bar.complete("again") is future
        assert bar.render_count == renders
        assert bar.state.message != "again"

    def test_complete_renders_once(self, make_indicator):
        bar = make_indicator(total=5)
        bar.run()
        renders = bar.render_count
        bar.complete()
        assert bar.render_count == renders + 1

    def test_submit_event_carries_value(self, make_indicator):
        bar = make_indicator(total=3)
        seen = []
        bar.host.on("submit", seen.append)
        bar.run()
        bar.complete()
        assert seen == [3]

    def test_complete_before_run(self, make_indicator):
        bar = make_indicator(total=4)
        bar.complete()
        assert bar.run().result(timeout=1) == 4


class TestScheduler:
    """Animation ticks against the lifecycle"""

    def test_ticks_before_run_do_not_render(self, make_indicator):
        spin = make_indicator()
        spin.scheduler.tick()
        assert spin.state.spinner_frame_index == 1
        assert spin.render_count == 0

    def test_ticks_render_while_running(self, make_indicator):
        spin = make_indicator()
        spin.run()
        spin.scheduler.tick()
        spin.scheduler.tick()
        assert spin.render_count == 3

    def test_frame_index_wraps(self, make_indicator):
        spin = make_indicator(spinner_frames=["a", "b", "c"])
        for _ in range(4):
            spin.scheduler.tick()
        assert spin.state.spinner_frame_index == 1
        assert spin.current_frame == "b"

    def test_no_tick_render_after_complete(self, make_indicator):
        spin = make_indicator()
        spin.run()
        spin.complete()
        renders = spin.render_count
        spin.scheduler.tick()
        assert spin.render_count == renders
        assert spin.scheduler.stop_calls == 1

    def test_scheduler_stopped_once_when_host_closes_again(self, make_indicator):
        spin = make_indicator()
        spin.run()
        spin.complete()
        spin.host.close()
        spin.cancel("late")
        assert spin.scheduler.stop_calls == 1


class TestCancellation:
    """Cancel path"""

    def test_cancel_rejects_future(self, make_indicator):
        spin = make_indicator()
        future = spin.run()
        spin.cancel("user abort")
        error = future.exception(timeout=1)
        assert isinstance(error, PromptCancelled)
        assert error.reason == "user abort"
        assert spin.phase is Phase.CANCELLED
        assert spin.scheduler.stop_calls == 1

    def test_host_cancel_path(self, make_indicator):
        spin = make_indicator()
        future = spin.run()
        spin.host.cancel("ctrl-c")
        with pytest.raises(PromptCancelled):
            future.result(timeout=1)

    def test_nothing_renders_after_cancel(self, make_indicator):
        spin = make_indicator()
        spin.run()
        spin.cancel()
        renders = spin.render_count
        spin.update(3)
        spin.scheduler.tick()
        spin.render()
        assert spin.render_count == renders
        assert spin.state.current == 0

    def test_complete_after_cancel_is_noop(self, make_indicator):
        bar = make_indicator(total=5)
        future = bar.run()
        bar.cancel()
        bar.complete()
        assert isinstance(future.exception(timeout=1), PromptCancelled)
        assert not bar.state.submitted

    def test_cancel_restores_cursor(self, make_indicator):
        bar = make_indicator(total=5)
        bar.run()
        assert bar.host.cursor_hidden
        bar.cancel()
        assert not bar.host.cursor_hidden
        assert bar.host.closed


class TestContextManager:
    """with ProgressIndicator(...)"""

    def test_clean_exit_completes(self, indicator_kwargs):
        with ProgressIndicator(message="Copy", total=3, **indicator_kwargs()) as bar:
            bar.update(1)
        assert bar.run().result(timeout=1) == 3

    def test_exception_cancels_and_propagates(self, indicator_kwargs):
        with pytest.raises(RuntimeError):
            with ProgressIndicator(total=3, **indicator_kwargs()) as bar:
                raise RuntimeError("disk full")
        error = bar.run().exception(timeout=1)
        assert isinstance(error, PromptCancelled)
        assert error.reason == "disk full"

    def test_keyboard_interrupt_cancels(self, indicator_kwargs):
        with pytest.raises(KeyboardInterrupt):
            with ProgressIndicator(**indicator_kwargs()) as spin:
                raise KeyboardInterrupt
        assert spin.phase is Phase.CANCELLED
        assert spin.scheduler.stop_calls == 1
