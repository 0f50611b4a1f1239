"""Tests for presentation state transitions."""

import pytest

from syscheck.ui.messages import (
    BatchReady,
    Exit,
    KeyPress,
    Quit,
    ScheduleTick,
    Send,
    Tick,
)
from syscheck.ui.model import Phase, PresentationState, init, update


def test_init_schedules_first_tick(display):
    state, effects = init(display)

    assert state.phase is Phase.LOADING
    assert effects == [ScheduleTick(display.tick_interval)]


def test_tick_advances_and_reschedules(display):
    state, effects = update(PresentationState(), Tick(), display)

    assert state.spinner_frame == 1
    assert effects == [ScheduleTick(0.1)]


def test_tick_wraps_around(display):
    last = len(display.spinner_frames) - 1
    state, _ = update(PresentationState(spinner_frame=last), Tick(), display)
    assert state.spinner_frame == 0


def test_tick_while_quitting_is_ignored(display):
    quitting = PresentationState(quitting=True, spinner_frame=3)
    state, effects = update(quitting, Tick(), display)

    assert state == quitting
    assert effects == []


def test_batch_ready_moves_to_displaying(display, two_results):
    state, effects = update(PresentationState(), BatchReady(two_results), display)

    assert state.phase is Phase.DISPLAYING
    assert state.batch == two_results
    assert effects == []


def test_quit_key_sends_quit(display):
    state, effects = update(PresentationState(), KeyPress("q"), display)

    assert state == PresentationState()
    assert effects == [Send(Quit())]


def test_other_keys_do_nothing(display):
    state, effects = update(PresentationState(), KeyPress("x"), display)

    assert state == PresentationState()
    assert effects == []


def test_quit_sets_flag_and_exits(display, two_results):
    displaying = PresentationState(batch=two_results)
    state, effects = update(displaying, Quit(), display)

    assert state.quitting
    assert state.phase is Phase.QUITTING
    assert effects == [Exit()]


def test_quit_before_batch(display, two_results):
    state, _ = update(PresentationState(), Quit(), display)
    state, _ = update(state, BatchReady(two_results), display)

    assert state.phase is Phase.QUITTING


def test_update_does_not_mutate(display, two_results):
    before = PresentationState()
    update(before, BatchReady(two_results), display)
    update(before, Tick(), display)

    assert before == PresentationState()


def test_unknown_event_rejected(display):
    with pytest.raises(TypeError):
        update(PresentationState(), object(), display)
