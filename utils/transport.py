import logging
from abc import ABC, abstractmethod

import socketio

log = logging.getLogger(__name__)


class Transport(ABC):
    """
    What the hub needs from the connection layer.
    """
    @abstractmethod
    async def send(self, sid: str, text: str) -> None:
        pass

    @abstractmethod
    async def disconnect(self, sid: str) -> None:
        pass


class SocketIOTransport(Transport):
    def __init__(self, socketio_instance: socketio.AsyncServer):
        self._sio = socketio_instance

    async def send(self, sid: str, text: str) -> None:
        await self._sio.send(text, to=sid)

    async def disconnect(self, sid: str) -> None:
        log.debug(f'Disconnecting \'{sid}\'.')
        await self._sio.disconnect(sid)
