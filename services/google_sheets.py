# services/google_sheets.py

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import gspread

from core.database import StorageBackend, BackendUnavailableError, DatabaseCorruptionError

logger = logging.getLogger(__name__)

DEFAULT_WORKSHEET = "habit_tracker"


def get_sheets_client(credentials_file: Optional[Path]):
    """Авторизация сервисного аккаунта Google"""
    if not credentials_file or not Path(credentials_file).exists():
        raise BackendUnavailableError(f"Файл учётных данных Google не найден: {credentials_file}")
    try:
        return gspread.service_account(filename=str(credentials_file))
    except Exception as e:
        logger.error(f"Ошибка авторизации Google Sheets: {e}")
        raise BackendUnavailableError(f"Ошибка авторизации Google Sheets: {e}")


class GoogleSheetsBackend(StorageBackend):
    """
    Хранилище записей в Google таблице.

    Лист содержит строки вида `ключ | JSON`, по одной на запись.
    """

    name = "google_sheets"

    def __init__(self, sheet_id: str, credentials_file: Optional[Path] = None,
                 worksheet_title: str = DEFAULT_WORKSHEET, client=None):
        self.sheet_id = sheet_id
        self.credentials_file = credentials_file
        self.worksheet_title = worksheet_title
        self._client = client
        self._worksheet = None

    def _get_worksheet(self):
        if self._worksheet is not None:
            return self._worksheet

        if self._client is None:
            self._client = get_sheets_client(self.credentials_file)

        try:
            spreadsheet = self._client.open_by_key(self.sheet_id)
            try:
                self._worksheet = spreadsheet.worksheet(self.worksheet_title)
            except gspread.exceptions.WorksheetNotFound:
                logger.info(f"Создаём лист {self.worksheet_title} в таблице {self.sheet_id}")
                self._worksheet = spreadsheet.add_worksheet(title=self.worksheet_title, rows=10, cols=2)
        except (gspread.exceptions.GSpreadException, OSError) as e:
            raise BackendUnavailableError(f"Таблица {self.sheet_id} недоступна: {e}")

        return self._worksheet

    def _find_row(self, worksheet, key: str) -> Optional[int]:
        keys = worksheet.col_values(1)
        if key in keys:
            return keys.index(key) + 1
        return None

    def load(self, key: str) -> Optional[Dict[str, Any]]:
        worksheet = self._get_worksheet()
        try:
            row = self._find_row(worksheet, key)
            if row is None:
                return None
            raw = worksheet.cell(row, 2).value
        except (gspread.exceptions.GSpreadException, OSError) as e:
            raise BackendUnavailableError(f"Ошибка чтения из Google Sheets: {e}")

        if not raw:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise DatabaseCorruptionError(f"Запись {key} в Google Sheets повреждена: {e}")

    def save(self, key: str, data: Dict[str, Any]) -> None:
        worksheet = self._get_worksheet()
        payload = json.dumps(data, ensure_ascii=False)
        try:
            row = self._find_row(worksheet, key)
            if row is None:
                worksheet.append_row([key, payload])
            else:
                worksheet.update_cell(row, 2, payload)
        except (gspread.exceptions.GSpreadException, OSError) as e:
            raise BackendUnavailableError(f"Ошибка записи в Google Sheets: {e}")


def sheets_backend_factory(credentials_file: Path, worksheet_title: str = DEFAULT_WORKSHEET):
    """Фабрика удалённого хранилища для StorageGateway"""
    def factory(sheet_id: str) -> GoogleSheetsBackend:
        return GoogleSheetsBackend(sheet_id, credentials_file, worksheet_title)
    return factory
