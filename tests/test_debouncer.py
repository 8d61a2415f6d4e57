"""Tests for the heartbeat debouncer."""

from wakatime_client.core.debouncer import HeartbeatDebouncer

FILE_A = "/repo/src/a.rs"
FILE_B = "/repo/src/b.rs"


def test_first_event_for_a_file_emits():
    debouncer = HeartbeatDebouncer(debounce_window=120)

    assert debouncer.should_emit(FILE_A, is_write=False, now=0.0)
    assert debouncer.active_file == FILE_A


def test_cursor_moves_within_window_emit_at_most_once():
    debouncer = HeartbeatDebouncer(debounce_window=120)

    emitted = [debouncer.should_emit(FILE_A, is_write=False, now=float(t)) for t in range(0, 120, 3)]

    assert emitted.count(True) == 1
    assert emitted[0] is True


def test_cursor_move_after_window_emits():
    debouncer = HeartbeatDebouncer(debounce_window=120)
    debouncer.should_emit(FILE_A, is_write=False, now=0.0)

    assert not debouncer.should_emit(FILE_A, is_write=False, now=119.9)
    assert debouncer.should_emit(FILE_A, is_write=False, now=120.0)


def test_edit_after_non_write_emission_always_emits():
    debouncer = HeartbeatDebouncer(debounce_window=120)
    debouncer.should_emit(FILE_A, is_write=False, now=0.0)

    assert debouncer.should_emit(FILE_A, is_write=True, now=0.5)


def test_rapid_edits_are_collapsed_until_window_elapses():
    debouncer = HeartbeatDebouncer(debounce_window=120)
    assert debouncer.should_emit(FILE_A, is_write=True, now=0.0)

    assert not debouncer.should_emit(FILE_A, is_write=True, now=1.0)
    assert not debouncer.should_emit(FILE_A, is_write=True, now=60.0)
    assert debouncer.should_emit(FILE_A, is_write=True, now=120.0)


def test_edit_burst_after_cursor_emission_starts_new_heartbeat():
    debouncer = HeartbeatDebouncer(debounce_window=120)
    debouncer.should_emit(FILE_A, is_write=True, now=0.0)
    debouncer.should_emit(FILE_A, is_write=False, now=130.0)

    assert debouncer.should_emit(FILE_A, is_write=True, now=131.0)


def test_switching_files_always_emits():
    debouncer = HeartbeatDebouncer(debounce_window=120)
    debouncer.should_emit(FILE_A, is_write=False, now=0.0)

    assert debouncer.should_emit(FILE_B, is_write=False, now=1.0)
    assert debouncer.should_emit(FILE_A, is_write=False, now=2.0)
    assert debouncer.active_file == FILE_A


def test_suppressed_events_do_not_update_state():
    debouncer = HeartbeatDebouncer(debounce_window=10)
    debouncer.should_emit(FILE_A, is_write=False, now=0.0)
    debouncer.should_emit(FILE_A, is_write=False, now=9.0)

    # Window is measured from the last emission, not the last event
    assert debouncer.should_emit(FILE_A, is_write=False, now=10.0)


def test_reset_forgets_everything():
    debouncer = HeartbeatDebouncer(debounce_window=120)
    debouncer.should_emit(FILE_A, is_write=False, now=0.0)

    debouncer.reset()

    assert debouncer.active_file is None
    assert debouncer.should_emit(FILE_A, is_write=False, now=1.0)


def test_stats_count_emitted_and_suppressed():
    debouncer = HeartbeatDebouncer(debounce_window=120)
    debouncer.should_emit(FILE_A, is_write=False, now=0.0)
    debouncer.should_emit(FILE_A, is_write=False, now=1.0)
    debouncer.should_emit(FILE_A, is_write=False, now=2.0)

    stats = debouncer.get_stats()
    assert stats["total_emitted"] == 1
    assert stats["total_suppressed"] == 2
    assert stats["tracked_files"] == 1
