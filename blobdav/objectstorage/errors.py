class StoreError(Exception):
    """The object store failed to carry out a request"""


class InvalidRange(StoreError):
    """The requested byte range lies outside of the object"""

    def __init__(self, key: str, size: int):
        super().__init__(f"Range not satisfiable for {key} ({size} bytes)")
        self.key = key
        self.size = size
