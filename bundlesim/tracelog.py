"""
Trace side channel for simulation runs.

The simulator reports arrivals, grants and the end of a run to a sink. The
default sink drops everything; ``FileTraceSink`` writes the plain-text logs
used for offline analysis:

    - log_arrival.txt: the IAT sequence, one value per line (written once)
    - log_delay.txt: per-request waits, one section per weight
    - log_grant.txt: inter-grant times, one section per weight (optional)

Nothing in the simulation reads these back.
"""

from pathlib import Path
from typing import Optional, Protocol, Sequence, TextIO, Union

from bundlesim.config import ARRIVAL_LOG_NAME, DELAY_LOG_NAME, GRANT_LOG_NAME


class TraceSink(Protocol):
    """Receiver for per-event trace records."""

    def begin_run(self, alpha: float) -> None: ...

    def on_arrival(self, time: int, iat: int) -> None: ...

    def on_grant(self, time: int, since_last_grant: int, waits: Sequence[int]) -> None: ...

    def on_end(self, time: int) -> None: ...

    def close(self) -> None: ...


class NullTraceSink:
    """Sink that ignores every record."""

    def begin_run(self, alpha: float) -> None:
        pass

    def on_arrival(self, time: int, iat: int) -> None:
        pass

    def on_grant(self, time: int, since_last_grant: int, waits: Sequence[int]) -> None:
        pass

    def on_end(self, time: int) -> None:
        pass

    def close(self) -> None:
        pass


class FileTraceSink:
    """
    Writes arrival, delay and grant logs into a directory.

    Arrival times do not depend on the weight, so the arrival log is written
    once from the IAT sequence given at construction. Each ``begin_run`` opens
    a new section headed by the weight in the delay (and grant) log.

    Attributes:
        directory: Where the log files live
        record_grants: Whether to write the inter-grant log
    """

    SECTION_RULE = "=" * 41

    def __init__(
        self,
        directory: Union[str, Path],
        iat: Sequence[int],
        record_grants: bool = False
    ) -> None:
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        self.record_grants = record_grants

        with open(self.directory / ARRIVAL_LOG_NAME, "w", encoding="utf-8") as arrival_file:
            for gap in iat:
                arrival_file.write(f"{gap}\n")

        self._delay_file: Optional[TextIO] = open(
            self.directory / DELAY_LOG_NAME, "w", encoding="utf-8"
        )
        self._grant_file: Optional[TextIO] = None
        if record_grants:
            self._grant_file = open(self.directory / GRANT_LOG_NAME, "w", encoding="utf-8")

    def _section(self, handle: Optional[TextIO], alpha: float) -> None:
        if handle is not None:
            handle.write(f"\n{self.SECTION_RULE}\nAlpha = {alpha}\n")

    def begin_run(self, alpha: float) -> None:
        self._section(self._delay_file, alpha)
        self._section(self._grant_file, alpha)

    def on_arrival(self, time: int, iat: int) -> None:
        pass

    def on_grant(self, time: int, since_last_grant: int, waits: Sequence[int]) -> None:
        if self._delay_file is not None:
            self._delay_file.write("".join(f"{wait}\t" for wait in waits))
        if self._grant_file is not None:
            self._grant_file.write(f"{since_last_grant}\t")

    def on_end(self, time: int) -> None:
        if self._grant_file is not None:
            self._grant_file.flush()
        if self._delay_file is not None:
            self._delay_file.flush()

    def close(self) -> None:
        for handle in (self._delay_file, self._grant_file):
            if handle is not None:
                handle.close()
        self._delay_file = None
        self._grant_file = None

    def __enter__(self) -> "FileTraceSink":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
