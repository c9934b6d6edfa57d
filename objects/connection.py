import datetime


class Connection:
    """
    A live connection and the time its last heartbeat was observed.
    """
    def __init__(self, sid: str, now: datetime.datetime) -> None:
        self.sid: str = sid
        self.registered: datetime.datetime = now
        self.last_heartbeat: datetime.datetime = now

    def update_last_heartbeat(self, now: datetime.datetime) -> None:
        self.last_heartbeat = now

    def to_dict(self, json_friendly: bool) -> dict:
        connection_obj = {
            'sid': self.sid,
            'registered': self.registered.isoformat() if json_friendly else self.registered,
            'last_heartbeat': self.last_heartbeat.isoformat() if json_friendly else self.last_heartbeat
        }
        return connection_obj
