import logging
import datetime
import threading
from typing import Dict, List, Optional, Union

from objects.alarm import Alarm

log = logging.getLogger(__name__)


class Alarms:
    """
    Thread-safe registry of running alarms keyed by name.

    Every alarm is owned by exactly one connection SID. Names are the only key,
    so starting an existing name hands it over to the new sender.
    """
    def __init__(self) -> None:
        self._alarms: Dict[str, Alarm] = {}
        self.lock = threading.RLock()

    def start(self, name: str, sid: str, now: datetime.datetime) -> Alarm:
        """
        Starts an alarm, overwriting any alarm with the same name.

        Args:
            name (str): Alarm name
            sid (str): SID of the owning connection
            now (datetime.datetime): Start time

        Returns:
            Alarm: The stored alarm.
        """
        alarm = Alarm(name, sid, now)
        with self.lock:
            previous = self._alarms.pop(name, None)
            if previous is not None and previous.owner != sid:
                log.debug(f'Alarm \'{name}\' taken over by \'{sid}\' from \'{previous.owner}\'.')
            self._alarms[name] = alarm
        return alarm

    def stop(self, name: str) -> Optional[Alarm]:
        """
        Stops an alarm.

        Args:
            name (str): Alarm name

        Returns:
            Optional[Alarm]: The removed alarm, or None if no such alarm was running.
        """
        with self.lock:
            return self._alarms.pop(name, None)

    def remove_all_owned_by(self, sid: str) -> List[Alarm]:
        """
        Removes every alarm owned by a connection.

        Args:
            sid (str): Connection SID

        Returns:
            List[Alarm]: The removed alarms.
        """
        with self.lock:
            removed = [alarm for alarm in self._alarms.values() if alarm.owner == sid]
            for alarm in removed:
                del self._alarms[alarm.name]
            return removed

    def top(self, max_count: int) -> List[Alarm]:
        """
        Returns at most `max_count` alarms, most recently started first.
        """
        with self.lock:
            alarm_list = list(self._alarms.values())
        # sorted() is stable, ties keep insertion order.
        alarm_list = sorted(alarm_list, key=lambda alarm: alarm.started_at, reverse=True)
        return alarm_list[:max(max_count, 0)]

    def render_top(self, max_count: int) -> str:
        """
        Renders the broadcast payload: each alarm as its name followed by an indented
        timestamp line, newest first. Alarms beyond `max_count` are left out.
        An empty registry renders an empty string.
        """
        return '\n'.join(alarm.render() for alarm in self.top(max_count))

    def get(self, name: str) -> Optional[Alarm]:
        with self.lock:
            return self._alarms.get(name, None)

    def get_list(self, json_friendly: bool) -> List[Union[dict, Alarm]]:
        alarm_list = self.top(len(self))
        if json_friendly:
            return [alarm.to_dict(json_friendly) for alarm in alarm_list]
        return alarm_list

    def __contains__(self, name: str) -> bool:
        with self.lock:
            return name in self._alarms

    def __len__(self) -> int:
        with self.lock:
            return len(self._alarms)
