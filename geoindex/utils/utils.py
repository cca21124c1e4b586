import json
import math
import sys
import typing as t
from datetime import datetime


def timestamp_string():
    return datetime.now().strftime("%Y-%m-%d-%Hh%Mm%Ss_%f")


class GeoIndexLog:
    def __init__(self, message: str, step: int, timestamp: str | None = None):
        self.message = message
        self.step = step
        self.timestamp = timestamp or timestamp_string()

    def __str__(self):
        return "At step {}: '{}'".format(self.step, self.message)

    def toJSON(self):
        return json.dumps(self, default=lambda o: o.__dict__, sort_keys=True, indent=4)


class GeoIndexLogger(list[GeoIndexLog]):
    """Keeps every log in memory and optionally echoes it to stderr, leaving
    stdout to query results."""

    def __init__(self, printout: bool = True, stream: t.TextIO | None = None):
        super(GeoIndexLogger, self).__init__()
        self.printout = printout
        self.stream = stream

    def append(self, log: GeoIndexLog):
        super(GeoIndexLogger, self).append(log)
        if self.printout:
            print(log, file=self.stream or sys.stderr)

    def log(self, message: str, step: int = 0):
        self.append(GeoIndexLog(message, step))

    def messages(self) -> t.List[str]:
        return [x.message for x in self]

    def save(self, path: str):
        """Write every log, with its step and timestamp, as a JSON list."""
        with open(path, "w") as f:
            f.write("[\n" + ",\n".join(log.toJSON() for log in self) + "\n]\n")


def euclidean_distance(a: t.Sequence[float], b: t.Sequence[float]):
    return math.sqrt((b[0] - a[0]) ** 2 + (b[1] - a[1]) ** 2)
