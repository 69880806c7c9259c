class FetchFailed(Exception):
    """The catalog could not be reached or answered with something unusable."""

    def __init__(self, operation: str, detail: str) -> None:
        super().__init__(f"{operation}: {detail}")
        self.operation = operation
        self.detail = detail


class MalformedPersistedState(ValueError):
    pass
