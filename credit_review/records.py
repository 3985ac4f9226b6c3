import logging
import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from .errors import NoCompanyDataError
from .normalizer import parse_value

logger = logging.getLogger(__name__)

ID_FIELD = "ID"
YEAR_FIELD = "Year"

METRIC_FIELDS = (
    "STD",
    "CPLTD",
    "LTD",
    "EBITDA",
    "Sales",
    "FCF",
    "TIE",
    "CR",
    "CapEx",
    "Assets",
)


@dataclass(frozen=True)
class Company:
    id: str
    name: str
    name_en: str = ""
    industry: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Company":
        industry = data.get("industry")
        return cls(
            id=str(data.get("id", "")).strip(),
            name=str(data.get("name", "")).strip(),
            name_en=str(data.get("nameEn", "") or "").strip(),
            industry=str(industry).strip() if industry else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "nameEn": self.name_en,
            "industry": self.industry,
        }


@dataclass(frozen=True)
class FinancialRecord:
    company_id: str
    year: int
    values: Mapping[str, Any] = field(default_factory=dict)

    def get(self, name: str, default: Any = None) -> Any:
        return self.values.get(name, default)

    def metric_or_zero(self, name: str) -> Any:
        # Blank, zero and missing cells all read as 0 on the scoring path.
        return self.values.get(name) or 0


def identifier_text(value: Any) -> str:
    """Render an identifier cell as text so 2412, 2412.0 and "2412" compare equal."""
    if value is None:
        return ""
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _is_empty_identifier(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value == 0
    return not str(value).strip()


def _coerce_year(value: Any, company_id: str) -> int:
    if isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value):
        return int(value)
    logger.warning("Record for %s has non-numeric year %r; using 0", company_id, value)
    return 0


def build_record(row: Mapping[Any, Any]) -> Optional[FinancialRecord]:
    values: Dict[str, Any] = {}
    for raw_key, raw_value in row.items():
        key = str(raw_key).strip()
        if not key:
            continue
        values[key] = parse_value(raw_value)

    raw_id = values.get(ID_FIELD)
    if _is_empty_identifier(raw_id):
        return None
    company_id = identifier_text(raw_id)
    return FinancialRecord(
        company_id=company_id,
        year=_coerce_year(values.get(YEAR_FIELD), company_id),
        values=MappingProxyType(values),
    )


def build_records(rows: Iterable[Mapping[Any, Any]]) -> List[FinancialRecord]:
    """Normalize raw sheet rows, dropping those without an identifier."""
    records: List[FinancialRecord] = []
    dropped = 0
    for row in rows:
        record = build_record(row)
        if record is None:
            dropped += 1
            continue
        records.append(record)
    if dropped:
        logger.info("Dropped %d rows without %s", dropped, ID_FIELD)
    return records


def filter_company_records(
    records: Sequence[FinancialRecord], company_id: Any
) -> List[FinancialRecord]:
    target = identifier_text(company_id)
    selected = [r for r in records if r.company_id == target]
    if not selected:
        raise NoCompanyDataError(target)
    return sorted(selected, key=lambda r: r.year)
