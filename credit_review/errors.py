from typing import Optional


class CreditReviewError(Exception):
    """Base error for the credit review pipeline."""


class DataLoadError(CreditReviewError):
    """Company directory or spreadsheet could not be loaded."""


class CompanyNotFoundError(CreditReviewError):
    pass


class NoCompanyDataError(CreditReviewError):
    def __init__(self, company_id: str) -> None:
        super().__init__(f"找不到該客戶的財務資料: {company_id}")
        self.company_id = company_id


class TransportError(CreditReviewError):
    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ParseError(CreditReviewError):
    """Model response did not contain a usable JSON object."""
