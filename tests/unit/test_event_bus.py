from __future__ import annotations

import asyncio
import threading

from careerdesk.core.events import EventBus


def test_publish_without_listeners_delivers_nothing() -> None:
    assert EventBus().publish({"name": "Careers"}) == 0


def test_subscriber_receives_events_published_from_other_threads() -> None:
    bus = EventBus()

    async def scenario() -> dict:
        queue = bus.register()
        pending = asyncio.ensure_future(queue.get())

        worker = threading.Thread(target=bus.publish, args=({"name": "Job Applications"},))
        worker.start()
        worker.join()

        event = await asyncio.wait_for(pending, timeout=2)
        bus.unregister(queue)
        return event

    assert asyncio.run(scenario()) == {"name": "Job Applications"}
    assert bus.subscriber_count == 0


def test_registered_queue_buffers_events_until_read() -> None:
    bus = EventBus()

    async def scenario() -> list[dict]:
        queue = bus.register()
        bus.publish({"id": 1})
        bus.publish({"id": 2})
        received = [await asyncio.wait_for(queue.get(), timeout=2) for _ in range(2)]
        bus.unregister(queue)
        return received

    assert asyncio.run(scenario()) == [{"id": 1}, {"id": 2}]
    assert bus.subscriber_count == 0
    assert bus.publish({"id": 3}) == 0
