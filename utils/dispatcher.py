"""
Reacts to connection events by updating the registries, then pruning and publishing.

Post-actions per event:
    open       register connection; nothing else
    close      evict connection and its alarms; sweep; publish
    message    apply start:/stop: if recognized; sweep; publish
    heartbeat  refresh connection; sweep; publish only if something was evicted
"""
import logging
import datetime
from typing import Callable, List, Optional, Tuple, TYPE_CHECKING

from utils.time_format import format_timestamp

if TYPE_CHECKING:
    from objects.alarms import Alarms
    from objects.connections import Connections
    from utils.broadcaster import Broadcaster
    from utils.pruner import Pruner
    from utils.transport import Transport

START_PREFIX = 'start:'
STOP_PREFIX = 'stop:'

log = logging.getLogger(__name__)


def parse_message(text: str) -> Tuple[Optional[str], str]:
    """
    Splits a client message into its command and alarm name.

    Args:
        text (str): Raw message payload

    Returns:
        Tuple[Optional[str], str]: ('start' | 'stop', name), or (None, '') if the
                                   payload matches neither prefix.
    """
    if not isinstance(text, str):
        return None, ''
    if text.startswith(START_PREFIX):
        return 'start', text[len(START_PREFIX):]
    if text.startswith(STOP_PREFIX):
        return 'stop', text[len(STOP_PREFIX):]
    return None, ''


class EventDispatcher:
    def __init__(self,
                 connections_instance: 'Connections',
                 alarms_instance: 'Alarms',
                 pruner_instance: 'Pruner',
                 broadcaster_instance: 'Broadcaster',
                 transport_instance: 'Transport',
                 clock: Callable[[], datetime.datetime] = datetime.datetime.now):
        self._connections = connections_instance
        self._alarms = alarms_instance
        self._pruner = pruner_instance
        self._broadcaster = broadcaster_instance
        self._transport = transport_instance
        self._clock = clock

    async def on_open(self, sid: str) -> None:
        self._connections.upsert(sid, self._clock())
        log.info(f'Client \'{sid}\' connected.')

    async def on_close(self, sid: str) -> None:
        evicted = self._pruner.evict(sid)
        if evicted:
            log.info(f'Client \'{sid}\' disconnected.')
        # Closing an already evicted connection changes nothing, the eviction published.
        if await self._sweep() or evicted:
            await self._broadcaster.publish()

    async def on_message(self, sid: str, text: str) -> None:
        command, name = parse_message(text)
        if command == 'start':
            self._start(sid, name)
        elif command == 'stop':
            self._stop(name)
        else:
            log.debug(f'Ignoring unrecognized message from \'{sid}\': {text!r}')
        await self._sweep()
        await self._broadcaster.publish()

    async def on_heartbeat(self, sid: str) -> None:
        self._connections.upsert(sid, self._clock())
        if await self._sweep():
            await self._broadcaster.publish()

    def _start(self, sid: str, name: str) -> None:
        now = self._clock()
        with self._connections.lock:
            # An evicted connection must not own alarms.
            if sid not in self._connections:
                log.warning(f'Ignoring start of \'{name}\' from unregistered client \'{sid}\'.')
                return
            self._alarms.start(name, sid, now)
        log.info(f'start: {name} ({format_timestamp(now)})')

    def _stop(self, name: str) -> None:
        alarm = self._alarms.stop(name)
        if alarm is not None:
            log.info(f'stop:  {name} ({format_timestamp(alarm.started_at)})')

    async def _sweep(self) -> List[str]:
        evicted_sids = self._pruner.sweep(self._clock())
        for sid in evicted_sids:
            try:
                await self._transport.disconnect(sid)
            except Exception as e:
                log.warning(f'Failed to disconnect expired client \'{sid}\': {e}')
        return evicted_sids
