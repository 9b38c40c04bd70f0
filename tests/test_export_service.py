"""Tests for the CSV user export."""

import asyncio

import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock, patch

from app.services.export_service import ExportService, format_utc
from tests.helpers import ADDRESS


@pytest.fixture
def users():
    service = MagicMock()
    service.list_users_raw = AsyncMock(return_value=[
        {
            "creationDate": datetime(2026, 10, 19, 10, 0, 0),
            "nickName": "satoshi",
            "publicAddress": ADDRESS,
            "email": "satoshi@example.com",
        },
        {"publicAddress": "0x02", "nickName": None},
    ])
    return service


@pytest.fixture
def export_service(users, tmp_path):
    return ExportService(users, export_dir=str(tmp_path), cleanup_delay_seconds=0)


class TestFormatUtc:
    def test_naive_datetime_is_treated_as_utc(self):
        assert format_utc(datetime(2026, 10, 19, 10, 0, 0)) == "Mon, 19 Oct 2026 10:00:00 GMT"

    def test_aware_datetime_is_converted(self):
        value = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone(timedelta(hours=2)))
        assert format_utc(value) == "Mon, 19 Oct 2026 10:00:00 GMT"

    def test_missing_date(self):
        assert format_utc(None) == ""


class TestBuildCsv:
    def test_header_only_for_no_users(self):
        assert ExportService.build_csv([]) == "Creation Date;Nickname;Public Address;Email\n"

    def test_rows_are_semicolon_delimited(self, users):
        text = ExportService.build_csv(users.list_users_raw.return_value)

        lines = text.splitlines()
        assert lines[1] == f"Mon, 19 Oct 2026 10:00:00 GMT;satoshi;{ADDRESS};satoshi@example.com"
        assert lines[2] == ";;0x02;"

    def test_values_with_delimiter_are_quoted(self):
        text = ExportService.build_csv([{"nickName": "a;b", "publicAddress": "0x1"}])
        assert text.splitlines()[1] == ';"a;b";0x1;'


class TestExportUsers:
    @pytest.mark.asyncio
    async def test_writes_file_in_export_dir(self, export_service, tmp_path):
        path = await export_service.export_users()

        assert path.parent == tmp_path
        assert path.name.startswith("UserExport-")
        assert path.suffix == ".csv"
        assert path.read_text(encoding="utf-8").startswith("Creation Date;Nickname")

    @pytest.mark.asyncio
    async def test_file_names_are_unique(self, export_service):
        first = await export_service.export_users()
        second = await export_service.export_users()
        assert first != second

    @pytest.mark.asyncio
    async def test_remove_later_deletes_file(self, export_service):
        path = await export_service.export_users()

        await export_service.remove_later(path)

        assert not path.exists()

    @pytest.mark.asyncio
    async def test_remove_later_tolerates_missing_file(self, export_service, tmp_path):
        await export_service.remove_later(tmp_path / "gone.csv")

    @pytest.mark.asyncio
    async def test_file_is_written_off_the_event_loop(self, export_service):
        loop = asyncio.get_running_loop()

        with patch.object(loop, "run_in_executor", wraps=loop.run_in_executor) as run:
            path = await export_service.export_users()

        run.assert_called_once()
        assert path.exists()


class TestCleanupDelay:
    @pytest.mark.asyncio
    async def test_file_survives_until_delay_elapses(self, users, tmp_path):
        service = ExportService(users, export_dir=str(tmp_path))
        path = await service.export_users()
        seen = {}

        async def fake_sleep(delay):
            seen["delay"] = delay
            seen["exists_during_delay"] = path.exists()

        with patch("app.services.export_service.asyncio.sleep", side_effect=fake_sleep):
            await service.remove_later(path)

        assert seen == {"delay": 2.0, "exists_during_delay": True}
        assert not path.exists()

    @pytest.mark.asyncio
    async def test_file_still_present_before_real_delay(self, users, tmp_path):
        service = ExportService(users, export_dir=str(tmp_path), cleanup_delay_seconds=0.2)
        path = await service.export_users()

        task = asyncio.create_task(service.remove_later(path))
        await asyncio.sleep(0.05)
        assert path.exists()

        await task
        assert not path.exists()
