import asyncio
import unittest

from contacthub.broadcast import UPDATE_EVENT, Broadcaster


class FakeConnection:
    def __init__(self, fail=False):
        self.messages = []
        self.fail = fail

    async def send_json(self, data):
        if self.fail:
            raise RuntimeError("socket closed")
        self.messages.append(data)


class BroadcasterTests(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.broadcaster = Broadcaster()

    async def test_publish_reaches_every_joined_connection(self):
        first, second = FakeConnection(), FakeConnection()
        await self.broadcaster.join("u1", first)
        await self.broadcaster.join("u1", second)

        delivered = await self.broadcaster.publish("u1", {"id": "c1"})

        self.assertEqual(delivered, 2)
        expected = {"event": UPDATE_EVENT, "data": {"id": "c1"}}
        self.assertEqual(first.messages, [expected])
        self.assertEqual(second.messages, [expected])

    async def test_publish_is_scoped_to_channel(self):
        mine, theirs = FakeConnection(), FakeConnection()
        await self.broadcaster.join("u1", mine)
        await self.broadcaster.join("u2", theirs)

        await self.broadcaster.publish("u1", {"id": "c1"})

        self.assertEqual(len(mine.messages), 1)
        self.assertEqual(theirs.messages, [])

    async def test_late_joiner_misses_earlier_events(self):
        await self.broadcaster.publish("u1", {"id": "c1"})
        late = FakeConnection()
        await self.broadcaster.join("u1", late)
        self.assertEqual(late.messages, [])

    async def test_publish_without_subscribers(self):
        self.assertEqual(await self.broadcaster.publish("nobody", {}), 0)

    async def test_failing_connection_is_skipped(self):
        broken, healthy = FakeConnection(fail=True), FakeConnection()
        await self.broadcaster.join("u1", broken)
        await self.broadcaster.join("u1", healthy)

        with self.assertLogs("contacthub.broadcast", level="WARNING"):
            delivered = await self.broadcaster.publish("u1", {"id": "c1"})

        self.assertEqual(delivered, 1)
        self.assertEqual(len(healthy.messages), 1)

    async def test_leave_removes_connection_from_all_channels(self):
        connection = FakeConnection()
        await self.broadcaster.join("u1", connection)
        await self.broadcaster.join("u2", connection)

        await self.broadcaster.leave(connection)

        self.assertEqual(await self.broadcaster.subscribers("u1"), 0)
        self.assertEqual(await self.broadcaster.subscribers("u2"), 0)
        await self.broadcaster.publish("u1", {"id": "c1"})
        self.assertEqual(connection.messages, [])

    async def test_events_arrive_in_publish_order(self):
        connection = FakeConnection()
        await self.broadcaster.join("u1", connection)
        for i in range(5):
            await self.broadcaster.publish("u1", {"id": i})
        self.assertEqual([m["data"]["id"] for m in connection.messages], list(range(5)))

    async def test_concurrent_join_and_leave(self):
        connections = [FakeConnection() for _ in range(50)]
        await asyncio.gather(*(self.broadcaster.join("u1", c) for c in connections))
        self.assertEqual(await self.broadcaster.subscribers("u1"), 50)
        await asyncio.gather(*(self.broadcaster.leave(c) for c in connections[:25]))
        self.assertEqual(await self.broadcaster.subscribers("u1"), 25)


if __name__ == "__main__":
    unittest.main()
