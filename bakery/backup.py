from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

BACKUP_PRODUCT_NAME = "risna_cookies"
BACKUP_EXTENSION = "sqlite"
BACKUP_MIME_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class BackupArtifact:
    filename: str
    data: bytes
    mime_type: str = BACKUP_MIME_TYPE

    @property
    def size(self) -> int:
        return len(self.data)


def backup_filename(day: Optional[date] = None, *, product_name: str = BACKUP_PRODUCT_NAME) -> str:
    day = day or date.today()
    return f"{product_name}_backup_{day.isoformat()}.{BACKUP_EXTENSION}"


def export_image(db, *, day: Optional[date] = None, product_name: str = BACKUP_PRODUCT_NAME) -> BackupArtifact:
    """Snapshot the live database as a downloadable file. Read only."""
    return BackupArtifact(filename=backup_filename(day, product_name=product_name), data=db.export_image())


def import_image(db, data: bytes) -> None:
    """Replace the whole database with an uploaded image.

    Raises CorruptImageError and leaves the running database untouched when
    ``data`` is not a loadable SQLite image. No merge: everything not in the
    upload is gone afterwards. Does not initialize ``db`` first, so it can
    replace a saved image that no longer loads.
    """
    db.load_image(bytes(data))
