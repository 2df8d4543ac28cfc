import asyncio
import unittest

from viewmodels.utils.debounce import Debouncer


class DebouncerTests(unittest.IsolatedAsyncioTestCase):
    async def test_only_last_submission_runs(self):
        calls = []
        debouncer = Debouncer(0.05)

        debouncer.submit(lambda: calls.append("a"))
        debouncer.submit(lambda: calls.append("b"))
        task = debouncer.submit(lambda: calls.append("c"))
        await task

        self.assertEqual(calls, ["c"])
        self.assertFalse(debouncer.pending)

    async def test_async_callables_are_awaited(self):
        calls = []

        async def work():
            await asyncio.sleep(0)
            calls.append("done")

        await Debouncer(0.01).submit(work)
        self.assertEqual(calls, ["done"])

    async def test_cancel_drops_pending_call(self):
        calls = []
        debouncer = Debouncer(0.05)

        task = debouncer.submit(lambda: calls.append("x"))
        debouncer.cancel()
        await asyncio.sleep(0.1)

        self.assertTrue(task.cancelled())
        self.assertEqual(calls, [])
