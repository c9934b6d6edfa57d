import asyncio
import logging
import argparse
from typing import Callable, Optional, Union

import socketio
from socketio.exceptions import SocketIOError

from utils.config import CONFIG

DEFAULT_URL = f'http://localhost:{CONFIG.port}'

log = logging.getLogger(__name__)


def print_alarms(text: str) -> None:
    print('--- alarms ---')
    print(text if text else '(none)')


class AlarmClient:
    """
    Connects to the alarm hub, keeps the connection alive with heartbeats and
    reports alarms started or stopped on this client.
    """
    def __init__(self,
                 url: str = DEFAULT_URL,
                 heartbeat_interval: Optional[Union[int, float]] = None,
                 on_alarms: Callable[[str], None] = print_alarms):
        if heartbeat_interval is None:
            heartbeat_interval = max(CONFIG.client_expiry - 1, 0.5)

        self.url = url
        self.heartbeat_interval = heartbeat_interval
        self.on_alarms = on_alarms
        self._sio = socketio.AsyncClient()
        self._heartbeat_task: Optional[asyncio.Task] = None
        self._running = False

        self._sio.on('connect', self._handle_connect)
        self._sio.on('disconnect', self._handle_disconnect)
        self._sio.on('message', self._handle_message)

    async def _handle_connect(self):
        log.info(f'Connected to {self.url}.')
        # Automatic reconnects land here too.
        self._start_heartbeat()

    async def _handle_disconnect(self, reason=None):
        log.info(f'Disconnected from {self.url}: {str(reason)}')

    async def _handle_message(self, data):
        self.on_alarms(data)

    def _start_heartbeat(self) -> None:
        if not self._running:
            return
        if self._heartbeat_task is None or self._heartbeat_task.done():
            self._heartbeat_task = asyncio.create_task(self._heartbeat_worker())

    async def _heartbeat_worker(self):
        # Survives drops; skips beats while the client is reconnecting.
        while self._running:
            if self._sio.connected:
                try:
                    await self._sio.emit('heartbeat')
                except SocketIOError as e:
                    log.warning(f'Heartbeat failed: {e}')
            await asyncio.sleep(self.heartbeat_interval)

    async def connect(self) -> None:
        self._running = True
        await self._sio.connect(self.url)
        self._start_heartbeat()

    async def start(self, name: str) -> None:
        await self._sio.send(f'start:{name}')

    async def stop(self, name: str) -> None:
        await self._sio.send(f'stop:{name}')

    async def wait(self) -> None:
        await self._sio.wait()

    async def disconnect(self) -> None:
        self._running = False
        if self._heartbeat_task is not None:
            self._heartbeat_task.cancel()
            self._heartbeat_task = None
        await self._sio.disconnect()


async def main(args: argparse.Namespace):
    client = AlarmClient(args.url, args.heartbeat)
    await client.connect()
    try:
        for name in args.start:
            await client.start(name)
        for name in args.stop:
            await client.stop(name)
        await client.wait()
    except asyncio.CancelledError:
        pass
    finally:
        await client.disconnect()

if __name__ == '__main__':
    logging.basicConfig(
        format='%(asctime)s [%(levelname)s] %(name)s - %(message)s',
        level=logging.INFO,
        datefmt='%Y-%m-%d %H:%M:%S',
    )

    parser = argparse.ArgumentParser(description='Alarm hub client')
    parser.add_argument('--url', default=DEFAULT_URL, help='Hub URL')
    parser.add_argument('--heartbeat', type=float, default=None, help='Heartbeat interval in seconds')
    parser.add_argument('--start', action='append', default=[], metavar='NAME', help='Start an alarm')
    parser.add_argument('--stop', action='append', default=[], metavar='NAME', help='Stop an alarm')

    try:
        asyncio.run(main(parser.parse_args()))
    except KeyboardInterrupt:
        pass
