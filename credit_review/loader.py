import io
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Tuple

from openpyxl import load_workbook

from .config import AppConfig
from .errors import DataLoadError
from .records import Company, FinancialRecord, build_records

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Dataset:
    companies: Tuple[Company, ...]
    records: Tuple[FinancialRecord, ...]
    sheet_name: str = ""


def read_first_sheet_rows(content: bytes) -> Tuple[str, List[Dict[str, Any]]]:
    """Return the first worksheet's name and its rows keyed by the header row."""
    if not content:
        raise DataLoadError("試算表內容為空")
    try:
        workbook = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except Exception as exc:
        raise DataLoadError(f"無法解析試算表: {exc}")

    try:
        if not workbook.worksheets:
            raise DataLoadError("試算表沒有任何工作表")
        sheet = workbook.worksheets[0]
        rows = sheet.iter_rows(values_only=True)
        header = next(rows, None)
        if header is None:
            return sheet.title, []
        keys = ["" if cell is None else str(cell) for cell in header]

        result: List[Dict[str, Any]] = []
        for row in rows:
            if row is None or all(cell is None for cell in row):
                continue
            item = {
                key: cell
                for key, cell in zip(keys, row)
                if key.strip() and cell is not None
            }
            result.append(item)
        return sheet.title, result
    finally:
        workbook.close()


def load_companies(path: Path) -> List[Company]:
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise DataLoadError(f"找不到公司清單: {path}")
    except (OSError, json.JSONDecodeError) as exc:
        raise DataLoadError(f"公司清單格式錯誤: {exc}")
    if not isinstance(raw, list):
        raise DataLoadError("公司清單必須是陣列")

    companies = [Company.from_dict(item) for item in raw if isinstance(item, dict)]
    return [c for c in companies if c.id]


def load_financial_records(path: Path) -> Tuple[str, List[FinancialRecord]]:
    try:
        content = Path(path).read_bytes()
    except OSError as exc:
        raise DataLoadError(f"無法讀取 {Path(path).name}: {exc}")
    sheet_name, rows = read_first_sheet_rows(content)
    return sheet_name, build_records(rows)


def load_dataset(config: AppConfig) -> Dataset:
    companies = load_companies(config.companies_path)
    sheet_name, records = load_financial_records(config.financials_path)
    logger.info(
        "Loaded %d companies and %d financial records from sheet %r",
        len(companies),
        len(records),
        sheet_name,
    )
    return Dataset(companies=tuple(companies), records=tuple(records), sheet_name=sheet_name)
