import pytest

from foundersync.datasets.normalize import normalize
from foundersync.domain.error_codes import ErrorCode
from foundersync.domain.models import SourceKind

HEADER = [f"col{i}" for i in range(30)]


def company_row(
    first="Ann",
    last="Lee",
    company="Acme",
    company_type="product_company",
    scores=("80", "70", "60", "75"),
    visits="1200",
) -> list[str]:
    fields = [""] * 30
    fields[0] = "1"
    fields[1] = first
    fields[2] = last
    fields[3] = "https://linkedin.com/company/acme"
    fields[4] = company
    fields[5] = "https://acme.io"
    fields[6] = "https://linkedin.com/in/ann"
    fields[7] = company_type
    fields[12], fields[18], fields[19], fields[20] = scores
    fields[29] = visits
    return fields


def test_greek_record_shape():
    result = normalize([HEADER, company_row()], SourceKind.GREEK_FOUNDERS)

    assert result.rows_total == 1
    assert result.records == [
        {
            "first_name": "Ann",
            "last_name": "Lee",
            "founder_name": "Ann Lee",
            "company_linkedin_url": "https://linkedin.com/company/acme",
            "company_name": "Acme",
            "company_website": "https://acme.io",
            "person_linkedin_url": "https://linkedin.com/in/ann",
            "company_type": "product_company",
            "founder_score": 80.0,
            "product_score": 70.0,
            "market_opportunity_score": 60.0,
            "overall_weighted_score": 75.0,
            "total_visits": 1200.0,
        }
    ]


def test_egg_record_omits_total_visits():
    result = normalize([HEADER, company_row()], "egg_accelerator")

    assert "total_visits" not in result.records[0]
    assert result.records[0]["overall_weighted_score"] == 75.0


def test_services_company_is_excluded():
    rows = [HEADER, company_row(company="Consult", company_type="services_company"), company_row()]

    result = normalize(rows, SourceKind.GREEK_FOUNDERS)

    assert [record["company_name"] for record in result.records] == ["Acme"]
    assert result.skipped_by_code() == {ErrorCode.FILTERED_OUT.value: 1}
    assert result.skipped[0].row_ref.row_no == 1
    assert result.skipped[0].diagnostic.field == "company_type"


def test_greek_requires_all_scores_egg_keeps_nulls():
    rows = [HEADER, company_row(scores=("80", "", "60", "75"))]

    greek = normalize(rows, SourceKind.GREEK_FOUNDERS)
    egg = normalize(rows, SourceKind.EGG_ACCELERATOR)

    assert greek.records == []
    assert greek.skipped[0].diagnostic.field == "product_score"
    assert len(egg.records) == 1
    assert egg.records[0]["product_score"] is None


def test_empty_company_name_is_skipped():
    result = normalize([HEADER, company_row(company="")], SourceKind.EGG_ACCELERATOR)

    assert result.records == []
    assert result.skipped[0].diagnostic.field == "company_name"


@pytest.mark.parametrize(
    ("first", "last", "expected"),
    [("Ann", "Lee", "Ann Lee"), ("Ann", "", "Ann"), ("", "Lee", "Lee"), ("", "", "")],
)
def test_founder_name_derivation(first, last, expected):
    result = normalize([HEADER, company_row(first=first, last=last)], SourceKind.EGG_ACCELERATOR)

    assert result.records[0]["founder_name"] == expected


def test_short_row_is_malformed():
    result = normalize([HEADER, ["1", "Ann", "Lee"]], SourceKind.GREEK_FOUNDERS)

    assert result.records == []
    assert result.skipped_by_code() == {ErrorCode.MALFORMED_ROW.value: 1}


def test_rows_shorter_than_visit_column_keep_null_visits():
    row = company_row()[:21]

    result = normalize([HEADER, row], SourceKind.GREEK_FOUNDERS)

    assert result.records[0]["total_visits"] is None


def test_sorted_by_overall_score_with_nulls_last():
    scores = ["10", "", "30", "", "20"]
    rows = [HEADER] + [
        company_row(company=f"C{i}", scores=("1", "1", "1", score)) for i, score in enumerate(scores)
    ]

    result = normalize(rows, SourceKind.EGG_ACCELERATOR)

    assert [r["overall_weighted_score"] for r in result.records] == [30.0, 20.0, 10.0, None, None]
    assert [r["company_name"] for r in result.records] == ["C2", "C4", "C0", "C1", "C3"]


def test_non_numeric_score_warns_and_nulls_field():
    result = normalize([HEADER, company_row(scores=("80", "n/a", "60", "75"))], SourceKind.EGG_ACCELERATOR)

    assert result.records[0]["product_score"] is None
    assert [w.diagnostic.code for w in result.warnings] == [ErrorCode.UNPARSEABLE_NUMBER.value]


def test_column_override_moves_field():
    row = company_row(company="")
    row[25] = "Relocated Inc"

    result = normalize([HEADER, row], SourceKind.GREEK_FOUNDERS, {"company_name": 25})

    assert result.records[0]["company_name"] == "Relocated Inc"


def test_column_override_rejects_unknown_field():
    with pytest.raises(ValueError):
        normalize([HEADER, company_row()], SourceKind.GREEK_FOUNDERS, {"nickname": 3})


def test_header_only_input():
    result = normalize([HEADER], SourceKind.GREEK_FOUNDERS)

    assert result.rows_total == 0
    assert result.records == []
