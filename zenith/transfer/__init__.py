"""
Import/Export Package

CSV export/import of transactions and JSON profile backups.
Everything here reads snapshots; the only writes go through the
store's public API.
"""

from zenith.transfer.csv_io import (
    CSV_HEADERS,
    REQUIRED_HEADERS,
    export_transactions_csv,
    import_transactions_csv,
    parse_transactions_csv,
)
from zenith.transfer.json_backup import (
    export_filename,
    export_profile_json,
    load_profile_backup,
    restore_profile_backup,
)

__all__ = [
    # CSV
    "CSV_HEADERS",
    "REQUIRED_HEADERS",
    "export_transactions_csv",
    "import_transactions_csv",
    "parse_transactions_csv",
    # JSON
    "export_filename",
    "export_profile_json",
    "load_profile_backup",
    "restore_profile_backup",
]
