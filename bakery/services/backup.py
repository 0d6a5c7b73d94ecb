from __future__ import annotations

from bakery import backup
from bakery.gateway import operation


@operation
def download_backup(db) -> backup.BackupArtifact:
    return backup.export_image(db)


@operation
def upload_backup(db, data: bytes) -> bool:
    backup.import_image(db, data)
    return True
