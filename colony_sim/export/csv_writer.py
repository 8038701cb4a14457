"""CSV export functionality for the colony simulation."""

import csv
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from ..model.state import SimulationState


AGENT_FIELDS = ['step', 'agent_id', 'role', 'specialization', 'state',
                'x', 'y', 'cargo', 'stalled']
EVENT_FIELDS = ['tick', 'kind', 'details']


class CSVWriter:
    """
    Exports simulation data to CSV format incrementally.

    Agent log format:
        step,agent_id,role,specialization,state,x,y,cargo,stalled
        1,1,explorer,,exploring,12,7,,0
        ...
    """

    def __init__(self, output_path: Path,
                 fieldnames: Sequence[str] = AGENT_FIELDS,
                 rows: Optional[Callable[["SimulationState"], List[Dict]]] = None):
        self.output_path = Path(output_path)
        self.fieldnames = list(fieldnames)
        self._rows = rows or (lambda state: state.to_csv_rows())
        self.file: Optional[object] = None
        self.writer: Optional[csv.DictWriter] = None
        self._is_open = False

    @classmethod
    def for_events(cls, output_path: Path) -> "CSVWriter":
        """Writer for the per-tick event log."""
        return cls(output_path, EVENT_FIELDS,
                   rows=lambda state: state.event_rows())

    def open(self) -> None:
        """Initialize file and write header."""
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self.file = open(self.output_path, 'w', newline='')
        self.writer = csv.DictWriter(self.file, fieldnames=self.fieldnames)
        self.writer.writeheader()
        self._is_open = True

    def append(self, state: "SimulationState") -> None:
        """Write state data for current step."""
        if not self._is_open:
            self.open()
        for row in self._rows(state):
            self.writer.writerow(row)
        self.file.flush()  # Ensure data is written

    def close(self) -> None:
        """Close file handle."""
        if self.file:
            self.file.close()
            self.file = None
            self.writer = None
            self._is_open = False

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
