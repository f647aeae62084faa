"""Tests for the corner editing state machine."""

from __future__ import annotations

import numpy as np
import pytest

from conftest import messages_at
from keystone_warp.editing import QuadEditor
from keystone_warp.errors import CornerCountError
from keystone_warp.geometry import CANONICAL_CORNERS
from keystone_warp.input import PointerEvent, PointerPhase, ViewportProjection

NEAR_CORNER_0 = (2.0, 98.0)
NEAR_CORNER_2 = (98.0, 2.0)


def test_drag_sequence_moves_corner_and_releases_it(editor: QuadEditor) -> None:
    editor.on_pointer_down(1, NEAR_CORNER_2)
    assert editor.selected.tolist() == [False, False, True, False]
    assert editor.pointers.corner_for(1) == 2

    editor.on_pointer_move(1, (80.0, 30.0))
    assert editor.consume_dirty() is True

    editor.on_pointer_up(1)

    np.testing.assert_allclose(editor.get_corners()[2], [0.8, 0.7])
    assert editor.selected[2] == False  # noqa: E712
    assert 1 not in editor.pointers
    np.testing.assert_allclose(editor.get_corners()[[0, 1, 3]], CANONICAL_CORNERS[[0, 1, 3]])


def test_pointer_down_does_not_dirty(editor: QuadEditor) -> None:
    editor.on_pointer_down(1, NEAR_CORNER_2)

    assert editor.consume_dirty() is False


def test_duplicate_pointer_down_is_a_protocol_violation(editor: QuadEditor, log_records) -> None:
    editor.on_pointer_down(7, NEAR_CORNER_2)

    editor.on_pointer_down(7, NEAR_CORNER_0)

    assert editor.selected.tolist() == [False, False, True, False]
    assert editor.pointers.corner_for(7) == 2
    assert len(editor.pointers) == 1
    assert any("already stored pointer id 7" in message for message in messages_at(log_records, "ERROR"))


def test_second_pointer_on_claimed_corner_is_ignored(editor: QuadEditor) -> None:
    editor.on_pointer_down(1, NEAR_CORNER_2)
    editor.on_pointer_down(2, (97.0, 3.0))

    assert 2 not in editor.pointers
    editor.on_pointer_move(2, (50.0, 50.0))
    assert editor.consume_dirty() is False
    np.testing.assert_allclose(editor.get_corners()[2], [1.0, 1.0])


def test_pointer_down_away_from_corners_claims_nothing(editor: QuadEditor) -> None:
    editor.on_pointer_down(1, (50.0, 50.0))

    assert len(editor.pointers) == 0
    assert not editor.selected.any()


def test_hit_test_prefers_lowest_index(projection: ViewportProjection) -> None:
    quad = QuadEditor(projection, selection_radius=0.8)
    quad.begin_editing()

    # the centre is equidistant from all four corners
    quad.on_pointer_down(3, (50.0, 50.0))

    assert quad.pointers.corner_for(3) == 0


def test_hit_test_uses_strict_radius(editor: QuadEditor) -> None:
    assert editor.hit_test(np.array([0.0, 0.05])) is None
    assert editor.hit_test(np.array([0.0, 0.049])) == 0


def test_move_of_unknown_pointer_is_noop(editor: QuadEditor) -> None:
    editor.on_pointer_move(42, (10.0, 10.0))

    assert editor.consume_dirty() is False
    np.testing.assert_allclose(editor.get_corners(), CANONICAL_CORNERS)


def test_up_and_cancel_of_unknown_pointer_are_noops(editor: QuadEditor) -> None:
    editor.on_pointer_up(42)
    editor.on_pointer_cancel(43)

    assert len(editor.pointers) == 0


def test_cancel_releases_like_up(editor: QuadEditor) -> None:
    editor.on_pointer_down(5, NEAR_CORNER_0)
    editor.on_pointer_cancel(5)

    assert 5 not in editor.pointers
    assert not editor.selected.any()


def test_handle_pointer_event_dispatches_by_phase(editor: QuadEditor) -> None:
    editor.handle_pointer_event(PointerEvent(9, PointerPhase.DOWN, NEAR_CORNER_0))
    editor.handle_pointer_event(PointerEvent(9, PointerPhase.STATIONARY, NEAR_CORNER_0))
    editor.handle_pointer_event(PointerEvent(9, PointerPhase.MOVE, (10.0, 80.0)))
    editor.handle_pointer_event(PointerEvent(9, PointerPhase.UP, (10.0, 80.0)))

    np.testing.assert_allclose(editor.get_corners()[0], [0.1, 0.2])
    assert len(editor.pointers) == 0


def test_multiple_pointers_drag_independent_corners(editor: QuadEditor) -> None:
    editor.on_pointer_down(1, NEAR_CORNER_0)
    editor.on_pointer_down(2, NEAR_CORNER_2)
    editor.on_pointer_move(1, (10.0, 90.0))
    editor.on_pointer_move(2, (90.0, 10.0))

    corners = editor.get_corners()
    np.testing.assert_allclose(corners[0], [0.1, 0.1])
    np.testing.assert_allclose(corners[2], [0.9, 0.9])
    assert editor.selected.tolist() == [True, False, True, False]


def test_input_is_ignored_while_idle(projection: ViewportProjection) -> None:
    quad = QuadEditor(projection, selection_radius=0.05)

    quad.on_pointer_down(1, NEAR_CORNER_0)
    quad.set_selected_by_index({1})
    quad.nudge_selected((1.0, 0.0), 0.1)

    assert len(quad.pointers) == 0
    assert not quad.selected.any()
    assert quad.consume_dirty() is False


def test_begin_editing_clears_selection_and_pointers(editor: QuadEditor) -> None:
    editor.on_pointer_down(1, NEAR_CORNER_0)
    editor.set_selected_by_index({0, 3})

    editor.begin_editing()

    assert not editor.selected.any()
    assert len(editor.pointers) == 0


def test_set_corners_rejects_wrong_length(editor: QuadEditor, log_records) -> None:
    before = editor.get_corners()

    with pytest.raises(CornerCountError):
        editor.set_corners([[0.0, 0.0], [1.0, 0.0], [1.0, 1.0]])

    np.testing.assert_array_equal(editor.get_corners(), before)
    assert editor.consume_dirty() is False
    assert messages_at(log_records, "ERROR")


def test_set_corners_replaces_and_marks_dirty(editor: QuadEditor) -> None:
    quad = [[0.1, 0.1], [0.9, 0.0], [1.0, 0.9], [0.0, 1.0]]

    editor.set_corners(quad)

    np.testing.assert_allclose(editor.get_corners(), quad)
    assert editor.consume_dirty() is True


def test_get_corners_returns_a_copy(editor: QuadEditor) -> None:
    corners = editor.get_corners()
    corners[0] = [0.5, 0.5]

    np.testing.assert_allclose(editor.get_corners(), CANONICAL_CORNERS)


def test_read_corners_fills_buffer_and_checks_shape(editor: QuadEditor, log_records) -> None:
    out = np.zeros((4, 2))
    editor.read_corners(out)
    np.testing.assert_allclose(out, CANONICAL_CORNERS)

    with pytest.raises(CornerCountError):
        editor.read_corners(np.zeros((3, 2)))
    assert messages_at(log_records, "ERROR")


def test_reset_to_canonical_restores_unit_square(editor: QuadEditor) -> None:
    editor.set_corners([[0.2, 0.2], [0.7, 0.1], [0.9, 0.8], [0.1, 0.6]])
    editor.consume_dirty()

    editor.reset_to_canonical()

    np.testing.assert_allclose(editor.get_corners(), [[0, 0], [1, 0], [1, 1], [0, 1]])
    assert editor.consume_dirty() is True


def test_consume_dirty_is_edge_triggered(editor: QuadEditor) -> None:
    editor.reset_to_canonical()

    assert editor.consume_dirty() is True
    assert editor.consume_dirty() is False


def test_set_selected_by_index_replaces_selection(editor: QuadEditor) -> None:
    editor.set_selected_by_index({0, 1})
    editor.set_selected_by_index({3})

    assert editor.selected.tolist() == [False, False, False, True]


def test_set_selected_by_index_rejects_out_of_range(editor: QuadEditor) -> None:
    with pytest.raises(IndexError):
        editor.set_selected_by_index({4})


def test_keyboard_selection_overrides_pointer_selection(editor: QuadEditor) -> None:
    editor.on_pointer_down(1, NEAR_CORNER_2)

    editor.set_selected_by_index(set())

    # the flag is shared: last writer wins, the drag itself continues
    assert not editor.selected.any()
    editor.on_pointer_move(1, (90.0, 10.0))
    np.testing.assert_allclose(editor.get_corners()[2], [0.9, 0.9])


def test_nudge_moves_only_selected_corners(editor: QuadEditor) -> None:
    editor.set_selected_by_index({1, 3})

    editor.nudge_selected((1.0, 0.0), 0.1)

    corners = editor.get_corners()
    np.testing.assert_allclose(corners[1], [1.1, 0.0])
    np.testing.assert_allclose(corners[3], [0.1, 1.0])
    np.testing.assert_allclose(corners[[0, 2]], CANONICAL_CORNERS[[0, 2]])
    assert editor.consume_dirty() is True


def test_nudge_without_selection_is_not_dirty(editor: QuadEditor) -> None:
    editor.nudge_selected((0.0, 1.0), 0.1)

    assert editor.consume_dirty() is False


def test_non_positive_selection_radius_is_rejected(projection: ViewportProjection) -> None:
    with pytest.raises(ValueError):
        QuadEditor(projection, selection_radius=0.0)
