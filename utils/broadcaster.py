import asyncio
import logging
from typing import Union, TYPE_CHECKING

if TYPE_CHECKING:
    from objects.alarms import Alarms
    from objects.connections import Connections
    from utils.transport import Transport

log = logging.getLogger(__name__)


class Broadcaster:
    def __init__(self,
                 transport_instance: 'Transport',
                 connections_instance: 'Connections',
                 alarms_instance: 'Alarms',
                 max_alarms: int,
                 send_timeout: Union[int, float]):
        self._transport = transport_instance
        self._connections = connections_instance
        self._alarms = alarms_instance
        self._max_alarms = max_alarms
        self._send_timeout = send_timeout

    async def _deliver(self, sid: str, text: str) -> bool:
        """
        Sends to one connection. Delivery is best-effort: failures and timeouts are
        logged and reported as False, never raised, so one bad connection cannot
        affect the others.
        """
        try:
            await asyncio.wait_for(self._transport.send(sid, text), timeout=self._send_timeout)
            return True
        except asyncio.TimeoutError:
            log.warning(f'Send to \'{sid}\' timed out after {self._send_timeout}s.')
        except Exception as e:
            log.warning(f'Send to \'{sid}\' failed: {e}')
        return False

    async def publish(self) -> int:
        """
        Renders the alarm list once and pushes it to every live connection.

        Returns:
            int: Number of connections the payload was delivered to.
        """
        payload = self._alarms.render_top(self._max_alarms)
        sids = self._connections.snapshot()
        if not sids:
            return 0

        results = await asyncio.gather(*[self._deliver(sid, payload) for sid in sids])
        delivered = sum(1 for result in results if result)
        log.debug(f'Published {len(self._alarms)} alarm(s) to {delivered}/{len(sids)} connection(s).')
        return delivered
