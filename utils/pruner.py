import logging
import datetime
from typing import Callable, List, Optional, Union, TYPE_CHECKING

if TYPE_CHECKING:
    from objects.alarms import Alarms
    from objects.connections import Connections

log = logging.getLogger(__name__)


class Pruner:
    """
    Evicts connections together with the alarms they own.

    Lock order is always connections, then alarms. Both locks are held while a
    connection and its alarms are removed, so no reader can see an alarm whose
    owner is already gone.
    """
    def __init__(self,
                 connections_instance: 'Connections',
                 alarms_instance: 'Alarms',
                 client_expiry: Union[int, float],
                 clock: Callable[[], datetime.datetime] = datetime.datetime.now):
        self._connections = connections_instance
        self._alarms = alarms_instance
        self._client_expiry = client_expiry
        self._clock = clock

    def _cascade(self, sid: str) -> bool:
        # Caller holds self._connections.lock
        with self._alarms.lock:
            removed = self._connections.remove(sid)
            alarms = self._alarms.remove_all_owned_by(sid)
        if alarms:
            log.info(f'Removed {len(alarms)} alarm(s) owned by \'{sid}\': '
                     f'{", ".join(alarm.name for alarm in alarms)}')
        return removed

    def evict(self, sid: str) -> bool:
        """
        Removes a connection and all of its alarms regardless of expiry.

        Args:
            sid (str): Connection SID

        Returns:
            bool: True if the connection was registered.
        """
        with self._connections.lock:
            return self._cascade(sid)

    def sweep(self, now: Optional[datetime.datetime] = None) -> List[str]:
        """
        Evicts every connection whose heartbeat is older than the expiry window.

        Args:
            now (datetime.datetime, optional): Time to evaluate expiry against.
                                               Defaults to the pruner's clock.

        Returns:
            List[str]: SIDs of evicted connections. Empty if nothing was pruned.
        """
        if now is None:
            now = self._clock()

        evicted_sids = []
        with self._connections.lock:
            for connection in self._connections.entries():
                if self._connections.is_expired(connection, now, self._client_expiry):
                    log.info(f'Expiring connection \'{connection.sid}\' '
                             f'(last heartbeat {connection.last_heartbeat.isoformat()}).')
                    self._cascade(connection.sid)
                    evicted_sids.append(connection.sid)
        return evicted_sids
