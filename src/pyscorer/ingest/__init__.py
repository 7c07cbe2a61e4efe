"""Input adapters that turn scorer CSV exports into records."""

from .dates import EPOCH_SENTINEL, month_key, normalize_date
from .files import ImportResult, classify_file, import_files, import_paths, load_sample_data
from .parser import RawRecord, missing_columns, parse_csv

__all__ = [
    "EPOCH_SENTINEL",
    "ImportResult",
    "RawRecord",
    "classify_file",
    "import_files",
    "import_paths",
    "load_sample_data",
    "missing_columns",
    "month_key",
    "normalize_date",
    "parse_csv",
]
