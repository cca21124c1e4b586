import typing as t


class RecordLoadError(Exception):
    def __init__(self, message: str, line_no: t.Optional[int] = None):
        super().__init__(
            message if line_no is None else "line {}: {}".format(line_no, message)
        )
        self.line_no = line_no


class IndexBuildError(Exception):
    pass


class InvalidAxisError(ValueError):
    def __init__(self, axis: int):
        super().__init__("Invalid axis {}, expected 0 (lon) or 1 (lat)".format(axis))
        self.axis = axis


class UnknownIndexError(KeyError):
    def __init__(self, name: str, available: t.Iterable[str]):
        super().__init__(
            "Unknown index '{}', available: {}".format(name, ", ".join(available))
        )
        self.name = name
