# tests/test_debouncer.py

"""Tests for the event-loop debouncer."""

import asyncio
import unittest

from src.services.debouncer import Debouncer, debounce


class TestDebouncer(unittest.IsolatedAsyncioTestCase):

    async def test_rapid_calls_fire_once_with_last_argument(self) -> None:
        seen: list[str] = []
        debounced = Debouncer(seen.append, 0.02)
        for text in ("l", "la", "lam", "lamp"):
            debounced(text)
        self.assertTrue(debounced.pending)
        await asyncio.sleep(0.06)
        self.assertEqual(seen, ["lamp"])
        self.assertFalse(debounced.pending)

    async def test_does_not_fire_before_wait(self) -> None:
        seen: list[int] = []
        debounced = Debouncer(seen.append, 0.2)
        debounced(1)
        await asyncio.sleep(0.01)
        self.assertEqual(seen, [])
        debounced.cancel()

    async def test_spaced_calls_each_fire(self) -> None:
        seen: list[int] = []
        debounced = Debouncer(seen.append, 0.01)
        debounced(1)
        await asyncio.sleep(0.04)
        debounced(2)
        await asyncio.sleep(0.04)
        self.assertEqual(seen, [1, 2])

    async def test_cancel_drops_pending_call(self) -> None:
        seen: list[int] = []
        debounced = Debouncer(seen.append, 0.01)
        debounced(1)
        self.assertTrue(debounced.cancel())
        self.assertFalse(debounced.cancel())
        await asyncio.sleep(0.03)
        self.assertEqual(seen, [])

    async def test_flush_fires_immediately(self) -> None:
        seen: list[int] = []
        debounced = Debouncer(seen.append, 10)
        debounced(7)
        debounced.flush()
        self.assertEqual(seen, [7])
        self.assertFalse(debounced.pending)

    async def test_coroutine_effect_is_awaited_by_drain(self) -> None:
        done: list[int] = []

        async def effect(value: int) -> None:
            await asyncio.sleep(0.01)
            done.append(value)

        debounced: Debouncer[int] = Debouncer(effect, 10)
        debounced(3)
        await debounced.drain()
        self.assertEqual(done, [3])

    async def test_raising_effect_is_logged_not_propagated(self) -> None:
        def effect(_: int) -> None:
            raise RuntimeError("boom")

        debounced = Debouncer(effect, 0)
        with self.assertLogs("pricefind.debounce", level="ERROR"):
            debounced(1)
            debounced.flush()

    async def test_decorator_form(self) -> None:
        seen: list[str] = []

        @debounce(0.01)
        def record(value: str) -> None:
            seen.append(value)

        record("a")
        record("b")
        await asyncio.sleep(0.04)
        self.assertEqual(seen, ["b"])


class TestDebouncerSync(unittest.TestCase):

    def test_negative_wait_rejected(self) -> None:
        with self.assertRaises(ValueError):
            Debouncer(print, -1)

    def test_call_outside_loop_raises(self) -> None:
        debounced = Debouncer(print, 0.1)
        with self.assertRaises(RuntimeError):
            debounced("x")


if __name__ == "__main__":
    unittest.main()
