class IngestRejected(Exception):
    """An intake body that cannot be accepted; carries the HTTP status to answer with."""

    def __init__(self, status_code: int, error: str) -> None:
        super().__init__(error)
        self.status_code = status_code
        self.error = error
