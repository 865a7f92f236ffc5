import pytest

from renderkit.depsgraph import CursorMove, Depsgraph, ResizeFramebuffer


def test_first_cursor_move_delta_is_position():
    graph = Depsgraph()
    graph.invoke_cursor_move(4.0, 7.0)
    assert graph.cursor_move.pos == (4.0, 7.0)
    assert graph.cursor_move.delta == (4.0, 7.0)
    assert graph.cursor_move.dirty


def test_cursor_delta_is_relative_to_previous_position():
    graph = Depsgraph()
    graph.invoke_cursor_move(10.0, 20.0)
    graph.invoke_cursor_move(13.0, 25.0)
    assert graph.cursor_move.delta == (3.0, 5.0)
    assert graph.cursor_move.pos == (13.0, 25.0)


def test_hooks_called_once_per_dirty_event():
    graph = Depsgraph()
    seen = []

    @graph.hook_cursor_move
    def on_move(event):
        seen.append(event.delta)

    graph.resolve_graph()
    assert seen == []
    graph.invoke_cursor_move(2.0, 3.0)
    graph.resolve_graph()
    graph.resolve_graph()
    assert seen == [(2.0, 3.0)]
    assert not graph.cursor_move.dirty


def test_hooks_run_in_registration_order():
    graph = Depsgraph()
    order = []
    graph.hook_cursor_move(lambda e: order.append("a"))
    graph.hook_cursor_move(lambda e: order.append("b"))
    graph.invoke_cursor_move(1.0, 1.0)
    graph.resolve_graph()
    assert order == ["a", "b"]


def test_resize_event_dispatch():
    graph = Depsgraph()
    received = []
    graph.hook_framebuffer_resize(lambda e: received.append((e.width, e.height)))
    graph.invoke_framebuffer_resize(800, 600)
    graph.resolve_graph()
    assert received == [(800, 600)]
    assert not graph.resize_framebuffer.dirty


def test_resize_does_not_trigger_cursor_hooks():
    graph = Depsgraph()
    moves = []
    graph.hook_cursor_move(lambda e: moves.append(e))
    graph.invoke_framebuffer_resize(10, 10)
    graph.resolve_graph()
    assert moves == []


def test_negative_resize_rejected():
    graph = Depsgraph()
    with pytest.raises(ValueError):
        graph.invoke_framebuffer_resize(-1, 10)


def test_hook_receives_event_instances():
    graph = Depsgraph()
    kinds = []
    graph.hook_cursor_move(lambda e: kinds.append(isinstance(e, CursorMove)))
    graph.hook_framebuffer_resize(
        lambda e: kinds.append(isinstance(e, ResizeFramebuffer))
    )
    graph.invoke_cursor_move(0.5, 0.5)
    graph.invoke_framebuffer_resize(1, 1)
    graph.resolve_graph()
    assert kinds == [True, True]