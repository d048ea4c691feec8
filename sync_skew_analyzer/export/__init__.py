"""Export package - log streams and console status.

- CsvLogSink: voltage and spectrum CSV streams (one header per block)
- NullSink: discards output when file logging is disabled
- StatusReporter: single carriage-return status line per block
"""

from .csv_logs import CsvLogSink, NullSink, SPECTRUM_COLUMNS, VOLTAGE_COLUMNS
from .status import StatusReporter, format_status

__all__ = [
    "CsvLogSink",
    "NullSink",
    "SPECTRUM_COLUMNS",
    "VOLTAGE_COLUMNS",
    "StatusReporter",
    "format_status",
]
