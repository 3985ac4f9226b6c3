from typing import Iterable, List, Optional

from .errors import CompanyNotFoundError
from .records import Company


class CompanyDirectory:
    def __init__(self, companies: Iterable[Company]) -> None:
        self._companies = list(companies)
        self._by_id = {c.id: c for c in self._companies}

    def __len__(self) -> int:
        return len(self._companies)

    def __iter__(self):
        return iter(self._companies)

    def first(self) -> Optional[Company]:
        return self._companies[0] if self._companies else None

    def get(self, company_id: str) -> Company:
        company = self._by_id.get(str(company_id).strip())
        if company is None:
            raise CompanyNotFoundError(f"Unknown company: {company_id}")
        return company

    def search(self, query: str, limit: Optional[int] = None) -> List[Company]:
        """Case-insensitive substring match on code, name and English name."""
        needle = (query or "").strip().lower()
        if not needle:
            return []
        matches = [
            c
            for c in self._companies
            if needle in c.id.lower()
            or needle in c.name.lower()
            or needle in c.name_en.lower()
        ]
        return matches[:limit] if limit else matches
