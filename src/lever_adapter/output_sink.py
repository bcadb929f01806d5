"""
OutputSink module writing one JSON record per line
"""

import sys
import json
from pathlib import Path
from typing import IO, Optional

from lever_adapter.record_schemas import LeverRecord


class JsonLinesSink:
    """Append-only sink encoding each record as a single JSON line"""

    def __init__(self, stream: IO[str], close_stream: bool = False):
        self.stream = stream
        self.close_stream = close_stream
        self.records_written = 0

    @classmethod
    def open(cls, output_path: Optional[Path] = None) -> 'JsonLinesSink':
        """
        Open a sink on stdout, or appending to a file

        Args:
            output_path: File to append to; stdout when None
        """
        if output_path is None:
            return cls(sys.stdout)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        return cls(open(output_path, 'a', encoding='utf-8'), close_stream=True)

    def emit(self, record: LeverRecord) -> None:
        """Write the record and flush so no output is held back between records"""
        self.stream.write(json.dumps(record.to_dict(), ensure_ascii=False))
        self.stream.write("\n")
        self.stream.flush()
        self.records_written += 1

    def close(self) -> None:
        if self.close_stream:
            self.stream.close()
