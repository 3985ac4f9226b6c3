import pytest

from credit_review.directory import CompanyDirectory
from credit_review.errors import CompanyNotFoundError
from credit_review.records import Company


DIRECTORY = CompanyDirectory(
    [
        Company(id="2412", name="中華電信", name_en="Chunghwa Telecom"),
        Company(id="2330", name="台積電", name_en="TSMC"),
        Company(id="2317", name="鴻海", name_en="Hon Hai Precision"),
    ]
)


def test_search_matches_code_and_names_case_insensitively():
    assert [c.id for c in DIRECTORY.search("23")] == ["2330", "2317"]
    assert [c.id for c in DIRECTORY.search("CHUNGHWA")] == ["2412"]
    assert [c.id for c in DIRECTORY.search("鴻")] == ["2317"]
    assert DIRECTORY.search("   ") == []
    assert len(DIRECTORY.search("2", limit=2)) == 2


def test_get_and_first():
    assert DIRECTORY.first().id == "2412"
    assert DIRECTORY.get(" 2330 ").name == "台積電"
    with pytest.raises(CompanyNotFoundError):
        DIRECTORY.get("0000")
    assert CompanyDirectory([]).first() is None
