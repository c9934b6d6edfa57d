import datetime

from utils.time_format import format_timestamp


class Alarm:
    def __init__(self, name: str, owner: str, started_at: datetime.datetime) -> None:
        self.name: str = name
        self.owner: str = owner
        self.started_at: datetime.datetime = started_at

    def render(self) -> str:
        return f'{self.name}\n  {format_timestamp(self.started_at)}'

    def to_dict(self, json_friendly: bool) -> dict:
        alarm_obj = {
            'name': self.name,
            'owner': self.owner,
            'started_at': self.started_at.isoformat() if json_friendly else self.started_at
        }
        return alarm_obj
