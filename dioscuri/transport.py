from typing import Protocol


class Transport(Protocol):
    """A byte stream to a single capsule, used for exactly one exchange."""

    @property
    def connected(self) -> bool:
        ...

    def connect(self, host: str, port: int) -> None:
        ...

    def send_all(self, data: bytes) -> None:
        ...

    def read_into(self, buffer: memoryview) -> int:
        """Fill ``buffer`` with the next bytes. Returns 0 at end of stream."""
        ...

    def close(self) -> None:
        ...
