import logging
import datetime
import threading
from typing import Dict, List, Optional, Union

from objects.connection import Connection

log = logging.getLogger(__name__)


class Connections:
    """
    Thread-safe registry of live connections keyed by sid.
    """
    def __init__(self) -> None:
        self._connections: Dict[str, Connection] = {}
        # Re-entrant so the pruner can hold it while calling back into the registry.
        self.lock = threading.RLock()

    def upsert(self, sid: str, now: datetime.datetime) -> Connection:
        """
        Adds a connection or refreshes its heartbeat timestamp.

        Args:
            sid (str): Connection SID
            now (datetime.datetime): Current time

        Returns:
            Connection: The stored connection entry.
        """
        with self.lock:
            connection = self._connections.get(sid, None)
            if connection is None:
                connection = Connection(sid, now)
                self._connections[sid] = connection
                log.debug(f'Connection \'{sid}\' registered.')
            else:
                connection.update_last_heartbeat(now)
            return connection

    def remove(self, sid: str) -> bool:
        """
        Removes a connection from the registry.

        Args:
            sid (str): Connection SID

        Returns:
            bool: True if the connection was found and removed, False otherwise.
        """
        with self.lock:
            if sid in self._connections:
                del self._connections[sid]
                log.debug(f'Connection \'{sid}\' removed.')
                return True
            return False

    @staticmethod
    def is_expired(connection: Connection,
                   now: datetime.datetime,
                   expiry_window: Union[int, float]) -> bool:
        """
        Checks whether a connection missed its heartbeat window.

        Args:
            connection (Connection): Connection entry
            now (datetime.datetime): Current time
            expiry_window (int | float): Heartbeat staleness window in seconds

        Returns:
            bool: True if `now` is past the last heartbeat plus the window.
        """
        return now > connection.last_heartbeat + datetime.timedelta(seconds=expiry_window)

    def get(self, sid: str) -> Optional[Connection]:
        with self.lock:
            return self._connections.get(sid, None)

    def snapshot(self) -> List[str]:
        """
        Returns a copy of the current SIDs, safe to iterate while the registry changes.
        """
        with self.lock:
            return list(self._connections.keys())

    def entries(self) -> List[Connection]:
        with self.lock:
            return list(self._connections.values())

    def get_list(self, json_friendly: bool) -> List[Union[dict, Connection]]:
        with self.lock:
            connection_list = []
            for connection in self._connections.values():
                if json_friendly:
                    connection_list.append(connection.to_dict(json_friendly))
                else:
                    connection_list.append(connection)
            return connection_list

    def __contains__(self, sid: str) -> bool:
        with self.lock:
            return sid in self._connections

    def __len__(self) -> int:
        with self.lock:
            return len(self._connections)
