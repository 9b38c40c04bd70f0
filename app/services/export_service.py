"""
User export service.

Writes the user listing to a semicolon-delimited CSV file that is streamed
to the client and removed from disk shortly afterwards.
"""

import asyncio
import csv
import io
import logging
import secrets
from datetime import datetime, timezone
from email.utils import format_datetime
from pathlib import Path
from typing import Iterable, Optional

from app.services.user_service import UserService

logger = logging.getLogger(__name__)


def format_utc(value: Optional[datetime]) -> str:
    """RFC 1123 date, e.g. 'Mon, 19 Oct 2026 10:00:00 GMT'."""
    if value is None:
        return ""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return format_datetime(value.astimezone(timezone.utc), usegmt=True)


class ExportService:
    """
    Builds and cleans up user export files.
    """

    HEADER = ["Creation Date", "Nickname", "Public Address", "Email"]
    DELIMITER = ";"

    def __init__(
        self,
        user_service: UserService,
        export_dir: str,
        cleanup_delay_seconds: float = 2.0,
    ):
        """
        Initialize ExportService.

        Args:
            user_service: Source of the user listing
            export_dir: Directory for temporary export files
            cleanup_delay_seconds: How long a file outlives its response
        """
        self._user_service = user_service
        self._export_dir = Path(export_dir)
        self._cleanup_delay = cleanup_delay_seconds

    @classmethod
    def build_csv(cls, users: Iterable[dict]) -> str:
        """Serialize users to CSV text with a header row."""
        output = io.StringIO()
        writer = csv.writer(output, delimiter=cls.DELIMITER, lineterminator="\n")

        writer.writerow(cls.HEADER)
        for user in users:
            writer.writerow([
                format_utc(user.get("creationDate")),
                user.get("nickName") or "",
                user.get("publicAddress") or "",
                user.get("email") or "",
            ])

        return output.getvalue()

    def make_file_path(self) -> Path:
        stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
        return self._export_dir / f"UserExport-{stamp}-{secrets.token_hex(4)}.csv"

    async def export_users(self) -> Path:
        """
        Write the current user listing to a new export file.

        Returns:
            Path of the written file
        """
        users = await self._user_service.list_users_raw()
        path = self.make_file_path()

        content = self.build_csv(users)
        loop = asyncio.get_running_loop()

        self._export_dir.mkdir(parents=True, exist_ok=True)
        await loop.run_in_executor(
            None,
            lambda: path.write_text(content, encoding="utf-8"),
        )

        logger.info(f"Wrote user export {path.name} ({len(users)} users)")
        return path

    async def remove_later(self, path: Path) -> None:
        """Delete an export file after the cleanup delay."""
        await asyncio.sleep(self._cleanup_delay)
        path.unlink(missing_ok=True)
        logger.debug(f"Removed user export {path.name}")
