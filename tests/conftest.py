import asyncio
import datetime

import pytest

from objects.alarms import Alarms
from objects.connections import Connections
from utils.broadcaster import Broadcaster
from utils.dispatcher import EventDispatcher
from utils.pruner import Pruner
from utils.transport import Transport

CLIENT_EXPIRY = 5
MAX_ALARMS = 4
SEND_TIMEOUT = 0.05


class FakeClock:
    def __init__(self, start: datetime.datetime = datetime.datetime(2026, 10, 19, 9, 0, 0)):
        self.now = start

    def __call__(self) -> datetime.datetime:
        return self.now

    def advance(self, seconds: float) -> datetime.datetime:
        self.now = self.now + datetime.timedelta(seconds=seconds)
        return self.now


class FakeTransport(Transport):
    """Records sends per SID. SIDs in `failing` raise, SIDs in `stalled` never complete."""
    def __init__(self):
        self.sent = []
        self.disconnected = []
        self.failing = set()
        self.stalled = set()

    async def send(self, sid, text):
        if sid in self.failing:
            raise ConnectionError(f'{sid} is gone')
        if sid in self.stalled:
            await asyncio.sleep(3600)
        self.sent.append((sid, text))

    async def disconnect(self, sid):
        self.disconnected.append(sid)

    def sent_to(self, sid):
        return [text for to, text in self.sent if to == sid]


class Hub:
    def __init__(self):
        self.client_expiry = CLIENT_EXPIRY
        self.clock = FakeClock()
        self.transport = FakeTransport()
        self.connections = Connections()
        self.alarms = Alarms()
        self.pruner = Pruner(self.connections, self.alarms, self.client_expiry, self.clock)
        self.broadcaster = Broadcaster(self.transport, self.connections, self.alarms,
                                       MAX_ALARMS, SEND_TIMEOUT)
        self.dispatcher = EventDispatcher(self.connections, self.alarms, self.pruner,
                                          self.broadcaster, self.transport, self.clock)

    def assert_consistent(self):
        for alarm in self.alarms.get_list(json_friendly=False):
            assert alarm.owner in self.connections, f'alarm {alarm.name!r} outlived {alarm.owner!r}'


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def hub():
    return Hub()
