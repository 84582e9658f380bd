from __future__ import annotations

import unittest
from pathlib import Path
import sys

from structlog.testing import capture_logs

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from lazyadb.commands import Broadcast, Focus, PopModal, PushModal, Quit, SendTo, StartOperation  # noqa: E402
from lazyadb.config import merge_keybindings  # noqa: E402
from lazyadb.errors import RoutingError  # noqa: E402
from lazyadb.events import EndOfInput, KeyPress, Resize, ScriptedEventSource, Tick  # noqa: E402
from lazyadb.loop import LoopState  # noqa: E402
from lazyadb.messages import Notice, OperationFinished, Resized  # noqa: E402
from lazyadb.models import Device  # noqa: E402
from lazyadb.messages import Tick as TickMessage  # noqa: E402
from lazyadb.operations import OperationKind, OperationResult, new_request  # noqa: E402
from lazyadb.tests.doubles import InlineExecutor, ManualExecutor, RecordingModal, RecordingPane, make_app  # noqa: E402


def _keys(app, *keys):
    for key in keys:
        app.post_event(KeyPress(key))
    return app.run_pending()


class ModalRoutingTests(unittest.TestCase):
    def test_only_top_modal_receives_keys(self):
        second = RecordingModal("second")
        first = RecordingModal("first", on_key={"o": [PushModal(second)]})
        pane = RecordingPane("list", on_key={"o": [PushModal(first)]})
        app = make_app([pane])

        _keys(app, "o", "o", "x", "y")

        self.assertEqual(pane.keys, ["o"])
        self.assertEqual(first.keys, ["o"])
        self.assertEqual(second.keys, ["x", "y"])
        self.assertEqual(app.modals, (first, second))

    def test_pushed_modal_does_not_see_triggering_message(self):
        modal = RecordingModal("late")
        pane = RecordingPane("list", on_message=lambda m: [PushModal(modal)] if isinstance(m, Notice) else [])
        app = make_app([pane])
        app.defer(None, Notice("hello"))
        app.run_pending()
        self.assertIs(app.top_modal, modal)
        self.assertEqual(modal.messages, [])

    def test_escape_pops_and_routing_returns_to_focused_pane(self):
        pane = RecordingPane("list")
        app = make_app([pane])
        app.push_modal(RecordingModal("m"))
        _keys(app, "ESC", "j")
        self.assertIsNone(app.top_modal)
        self.assertEqual(pane.keys, ["j"])

    def test_focus_keys_go_to_modal_while_open(self):
        modal = RecordingModal("m")
        app = make_app([RecordingPane("a"), RecordingPane("b")])
        app.push_modal(modal)
        _keys(app, "TAB")
        self.assertEqual(modal.keys, ["TAB"])
        self.assertEqual(app.focused_pane_id, "a")


class GlobalKeyTests(unittest.TestCase):
    def test_quit_key_passes_through_modal(self):
        modal = RecordingModal("m")
        app = make_app([RecordingPane("list")])
        app.push_modal(modal)
        _keys(app, "CTRL_C")
        self.assertEqual(modal.keys, [])
        self.assertIs(app.state, LoopState.QUITTING)

    def test_redraw_key_passes_through_modal(self):
        modal = RecordingModal("m")
        app = make_app([RecordingPane("list")])
        app.push_modal(modal)
        app.force_redraw = False
        _keys(app, "CTRL_L")
        self.assertEqual(modal.keys, [])
        self.assertTrue(app.force_redraw)
        self.assertIs(app.state, LoopState.RUNNING)

    def test_modal_can_withhold_a_global_key(self):
        modal = RecordingModal("m", passthrough_keys=frozenset({"CTRL_C"}))
        app = make_app([RecordingPane("list")])
        app.push_modal(modal)
        app.force_redraw = False
        _keys(app, "CTRL_L")
        self.assertEqual(modal.keys, ["CTRL_L"])
        self.assertFalse(app.force_redraw)

    def test_rebound_global_key(self):
        keybindings = merge_keybindings({"global": {"CTRL_C": None, "CTRL_Q": "quit"}})
        pane = RecordingPane("list")
        app = make_app([pane], keybindings=keybindings)
        app.push_modal(RecordingModal("m"))
        _keys(app, "CTRL_C")
        self.assertIs(app.state, LoopState.RUNNING)
        _keys(app, "CTRL_Q")
        self.assertIs(app.state, LoopState.QUITTING)


class FocusTests(unittest.TestCase):
    def test_tab_cycles_focusable_visible_panes(self):
        header = RecordingPane("header", focusable=False)
        hidden = RecordingPane("hidden")
        hidden.visible = False
        app = make_app([header, RecordingPane("a"), hidden, RecordingPane("b")])
        self.assertEqual(app.focused_pane_id, "a")
        _keys(app, "TAB")
        self.assertEqual(app.focused_pane_id, "b")
        _keys(app, "TAB")
        self.assertEqual(app.focused_pane_id, "a")
        _keys(app, "BACKTAB")
        self.assertEqual(app.focused_pane_id, "b")

    def test_push_pop_restores_focus_exactly(self):
        modal = RecordingModal("m")
        pane_a = RecordingPane("a", on_key={"f": [Focus("b")], "m": [PushModal(modal)]})
        pane_b = RecordingPane("b", on_key={"m": [PushModal(modal)]})
        app = make_app([pane_a, pane_b])
        _keys(app, "f")
        self.assertEqual(app.focused_pane_id, "b")
        for _ in range(3):
            _keys(app, "m")
            self.assertIs(app.top_modal, modal)
            _keys(app, "ESC")
            self.assertIsNone(app.top_modal)
            self.assertEqual(app.focused_pane_id, "b")

    def test_focus_on_unfocusable_pane_is_fatal(self):
        app = make_app([RecordingPane("a"), RecordingPane("status", focusable=False)])
        with self.assertRaises(RoutingError):
            app.interpreter.execute([(None, [Focus("status")])])


class ResultRoutingTests(unittest.TestCase):
    def test_result_goes_only_to_owner(self):
        request = new_request(OperationKind.LIST_DEVICES)
        owner = RecordingPane("owner", on_key={"r": [StartOperation(request)]})
        other = RecordingPane("other")
        app = make_app([owner, other])
        _keys(app, "r")
        app.executor.succeed(request.token, ["x"])
        app.run_pending()
        finished = [m for m in owner.messages if isinstance(m, OperationFinished)]
        self.assertEqual(len(finished), 1)
        self.assertEqual(finished[0].result.payload, ("x",))
        self.assertEqual(other.messages, [])
        self.assertEqual(app.pending_tokens, ())

    def test_stale_result_from_popped_modal_is_dropped(self):
        request = new_request(OperationKind.REBOOT, "emulator-5554")
        modal = RecordingModal("detail", on_key={"r": [StartOperation(request)]})
        pane = RecordingPane("list")
        app = make_app([pane])
        app.push_modal(modal)
        _keys(app, "r", "ESC")
        self.assertIsNone(app.top_modal)

        app.executor.succeed(request.token)
        with capture_logs() as logs:
            processed = app.run_pending()

        self.assertEqual(processed, 1)
        self.assertEqual(modal.messages, [])
        self.assertEqual(pane.messages, [])
        dropped = [entry for entry in logs if entry["event"] == "operation_result_dropped"]
        self.assertEqual(len(dropped), 1)
        self.assertEqual(dropped[0]["reason"], "owner_gone")
        self.assertEqual(dropped[0]["log_level"], "warning")

    def test_unknown_token_is_dropped(self):
        pane = RecordingPane("list")
        app = make_app([pane])
        request = new_request(OperationKind.LIST_DEVICES)
        app.post_result(OperationResult.failure(request, "late"))
        with capture_logs() as logs:
            app.run_pending()
        self.assertEqual(pane.messages, [])
        self.assertEqual([e["reason"] for e in logs if e["event"] == "operation_result_dropped"], ["unknown_token"])

    def test_results_may_complete_out_of_order(self):
        first = new_request(OperationKind.SHELL, "s1", command="a")
        second = new_request(OperationKind.SHELL, "s1", command="b")
        pane = RecordingPane("list", on_key={"r": [StartOperation(first), StartOperation(second)]})
        app = make_app([pane])
        _keys(app, "r")
        self.assertEqual([r.token for r in app.executor.submitted], [first.token, second.token])
        app.executor.succeed(second.token)
        app.executor.succeed(first.token)
        app.run_pending()
        tokens = [m.result.token for m in pane.messages if isinstance(m, OperationFinished)]
        self.assertEqual(tokens, [second.token, first.token])


class CommandOrderingTests(unittest.TestCase):
    def test_send_to_arrives_before_instant_result(self):
        seen = []
        notice = Notice("sibling first")
        request = new_request(OperationKind.LIST_DEVICES)
        pane_a = RecordingPane(
            "a",
            on_key={"go": [SendTo("b", notice), StartOperation(request)]},
            on_message=lambda m: seen.append(("a", m)) or [],
        )
        pane_b = RecordingPane("b", on_message=lambda m: seen.append(("b", m)) or [])
        app = make_app([pane_a, pane_b], executor=InlineExecutor)

        _keys(app, "go")

        self.assertEqual(seen[0], ("b", notice))
        self.assertEqual(seen[1][0], "a")
        self.assertIsInstance(seen[1][1], OperationFinished)
        self.assertEqual(seen[1][1].result.token, request.token)

    def test_broadcast_order_panes_then_modals_bottom_to_top(self):
        order = []

        def recorder(name):
            return lambda m: order.append(name) or []

        late = RecordingModal("late")
        p1 = RecordingPane("p1", on_message=lambda m: order.append("p1") or [PushModal(late)])
        p2 = RecordingPane("p2", on_message=recorder("p2"))
        m1 = RecordingModal("m1", on_message=recorder("m1"))
        m2 = RecordingModal("m2", on_key={"b": [Broadcast(Notice("all"))]}, on_message=recorder("m2"))
        app = make_app([p1, p2])
        app.push_modal(m1)
        app.push_modal(m2)

        _keys(app, "b")

        self.assertEqual(order, ["p1", "p2", "m1", "m2"])
        self.assertIs(app.top_modal, late)
        self.assertEqual(late.messages, [])

    def test_tick_and_resize_are_broadcast(self):
        pane = RecordingPane("list")
        modal = RecordingModal("m")
        app = make_app([pane], now=42.0)
        app.push_modal(modal)
        app.post_event(Tick())
        app.post_event(Tick(now=7.5))
        app.post_event(Resize(120, 40))
        app.run_pending()
        self.assertEqual(pane.messages, [TickMessage(42.0), TickMessage(7.5), Resized(120, 40)])
        self.assertEqual(modal.messages, pane.messages)
        self.assertEqual(app.size, (120, 40))


class QuitTests(unittest.TestCase):
    def test_quit_drops_later_results(self):
        request = new_request(OperationKind.LIST_DEVICES)
        pane = RecordingPane("list", on_key={"r": [StartOperation(request)], "q": [Quit()]})
        app = make_app([pane])
        _keys(app, "r", "q")
        self.assertIs(app.state, LoopState.QUITTING)
        self.assertEqual(app.pending_tokens, ())

        app.executor.succeed(request.token)
        app.post_event(KeyPress("r"))
        self.assertEqual(app.run_pending(), 0)
        self.assertEqual(pane.messages, [])
        self.assertEqual(pane.keys, ["r", "q"])

    def test_quit_stops_rest_of_batch(self):
        modal = RecordingModal("m")
        pane = RecordingPane("list", on_key={"q": [Quit(), PushModal(modal), SendTo("list", Notice("x"))]})
        app = make_app([pane])
        _keys(app, "q")
        self.assertIsNone(app.top_modal)
        self.assertEqual(pane.messages, [])

    def test_end_of_input_quits(self):
        app = make_app([RecordingPane("list")])
        app.post_event(EndOfInput())
        app.run_pending()
        self.assertIs(app.state, LoopState.QUITTING)

    def test_run_terminates_on_scripted_source(self):
        pane = RecordingPane("list")
        app = make_app([pane])
        app.run(ScriptedEventSource([KeyPress("a"), KeyPress("b")]))
        self.assertIs(app.state, LoopState.QUITTING)
        self.assertEqual(pane.keys, ["a", "b"])
        self.assertTrue(app.executor.closed)


class RoutingErrorTests(unittest.TestCase):
    def test_send_to_unknown_target_is_fatal(self):
        app = make_app([RecordingPane("list", on_key={"s": [SendTo("nowhere", Notice("x"))]})])
        app.post_event(KeyPress("s"))
        with self.assertRaises(RoutingError):
            app.run_pending()

    def test_focus_unknown_pane_is_fatal(self):
        app = make_app([RecordingPane("list", on_key={"f": [Focus("nowhere")]})])
        app.post_event(KeyPress("f"))
        with self.assertRaises(RoutingError):
            app.run_pending()

    def test_pop_with_empty_stack_is_fatal(self):
        app = make_app([RecordingPane("list", on_key={"p": [PopModal()]})])
        app.post_event(KeyPress("p"))
        with self.assertRaises(RoutingError):
            app.run_pending()

    def test_start_operation_without_owner_is_fatal(self):
        app = make_app([RecordingPane("list")])
        with self.assertRaises(RoutingError):
            app.interpreter.execute([(None, [StartOperation(new_request(OperationKind.LIST_DEVICES))])])

    def test_duplicate_pane_ids_rejected(self):
        with self.assertRaises(RoutingError):
            make_app([RecordingPane("x"), RecordingPane("x")])

    def test_send_to_modal_popped_before_delivery_is_dropped(self):
        modal = RecordingModal("target")
        pane = RecordingPane("list", on_key={"s": [SendTo("target", Notice("x"))]})
        app = make_app([pane])
        app.push_modal(modal)
        app.interpreter.execute([(pane, [SendTo("target", Notice("x")), PopModal()])])
        with capture_logs() as logs:
            app.run_pending()
        self.assertEqual(modal.messages, [])
        self.assertEqual([e["event"] for e in logs], ["message_dropped"])

    def test_send_to_replaced_modal_with_same_id_is_dropped(self):
        old = RecordingModal("target")
        new = RecordingModal("target")
        pane = RecordingPane("list")
        app = make_app([pane])
        app.push_modal(old)
        app.interpreter.execute([(pane, [SendTo("target", Notice("x")), PopModal(), PushModal(new)])])
        with capture_logs() as logs:
            app.run_pending()
        self.assertEqual(old.messages, [])
        self.assertEqual(new.messages, [])
        self.assertEqual([e["event"] for e in logs], ["message_dropped"])
        self.assertIs(app.top_modal, new)


class TokenTests(unittest.TestCase):
    def test_tokens_are_unique_and_increasing(self):
        tokens = [new_request(OperationKind.LIST_DEVICES).token for _ in range(50)]
        self.assertEqual(len(set(tokens)), 50)
        self.assertEqual(tokens, sorted(tokens))

    def test_requests_and_results_are_hashable(self):
        device = Device("emulator-5554", "device")
        request = new_request(OperationKind.DEVICE_INFO, device.serial, device=device)
        result = OperationResult.success(request, [device, {"b": [1], "a": 2}])
        self.assertEqual(request.param("device"), device)
        self.assertIsNone(request.param("missing"))
        self.assertEqual(result.payload, (device, (("a", 2), ("b", (1,)))))
        self.assertEqual(len({request, request}), 1)
        self.assertEqual(len({result, result}), 1)


if __name__ == "__main__":
    unittest.main()
