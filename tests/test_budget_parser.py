import pytest

from budget_dashboard.parsers import BudgetWorkbookParser, match_program_sheet

from conftest import HEADER, build_xlsx_bytes


@pytest.mark.parametrize(
    "name, expected",
    [
        ("PROGRAMME 118", "118"),
        ("Prog118", "118"),
        ("P 205", "205"),
        ("p101 bis", "101"),
        ("PROGRAMME 1180", None),
        ("P12", None),
        ("Synthèse", None),
    ],
)
def test_match_program_sheet(name, expected):
    assert match_program_sheet(name) == expected


def test_reference_row_is_extracted_with_program_and_admin_context():
    raw = build_xlsx_bytes(
        {
            "PROGRAMME 118": [
                ["Budget 2024", None, None, None, None, "Paragraphe Code", None, "AE"],
                ["", "Activité X", "", "", "DeptA", "612024", "Some label", "1000", "800", "500"],
            ]
        }
    )

    result = BudgetWorkbookParser(raw).parse()

    assert result.ok
    assert result.record_count == 1
    line = result.records[0]
    assert line["program_code"] == "118"
    assert line["program_name"] == "PROGRAMME 118"
    assert line["activity_name"] == "Activité X"
    assert line["admin_unit_code"] == "DeptA"
    assert line["paragraph_code"] == "612024"
    assert line["paragraph_name"] == "Some label"
    assert line["ae"] == pytest.approx(1000)
    assert line["cp"] == pytest.approx(800)
    assert line["engaged"] == pytest.approx(500)
    assert line["_row"] == 2


def test_full_sheet_hierarchy_and_fill_down():
    raw = build_xlsx_bytes(
        {
            "PROG 205": [
                ["Programme 205 - Affaires maritimes"],
                HEADER,
                ["Action 1 : Sécurité", None, None, None, None, None, None, None, None, None],
                [None, "[01] Signalisation", None, None, None, None, None, None, None, None],
                [None, None, "Entretien des phares", "D01", "Direction Ouest", None, None, None, None, None],
                [None, None, None, None, None, "612024", "Carburant", 1200, 1000, 300],
                [None, None, None, None, None, "612025", "Pièces", 0, 0, 0],
                [None, None, None, None, None, "612026", "Travaux", 5000.5, 2500, 0],
                [None, "Total activité 01", None, None, None, None, None, 6200.5, 3500, 300],
                ["Action 2 : Formation", None, None, None, None, None, None, None, None, None],
                [None, None, None, None, None, "613001", "Stages", 700, 700, 100],
                ["Total action 2", None, None, None, None, None, None, 700, 700, 100],
            ],
            "Synthèse": [
                HEADER,
                [None, None, None, None, None, "612024", "Carburant", 9, 9, 9],
            ],
        }
    )

    result = BudgetWorkbookParser(raw).parse()

    assert [line["paragraph_code"] for line in result.records] == ["612024", "612026", "613001"]
    first, second, third = result.records

    assert (first["action_code"], first["action_name"]) == ("01", "Sécurité")
    assert (first["activity_code"], first["activity_name"]) == ("01", "Signalisation")
    assert first["task_name"] == "Entretien des phares"
    assert first["admin_unit_code"] == "D01"
    assert first["admin_unit_name"] == "Direction Ouest"
    assert second["admin_unit_code"] == "D01"
    assert second["ae"] == pytest.approx(5000.5)

    assert third["action_code"] == "02"
    assert third["activity_code"] == "01"
    assert third["activity_name"] == "Activité 01"
    assert third["task_name"] == ""
    assert third["admin_unit_code"] == "D01"

    assert result.metadata["sheets_processed"] == ["PROG 205"]
    assert result.metadata["skipped_sheets"] == ["Synthèse"]
    assert result.metadata["rows_by_kind"]["placeholder"] == 1
    assert result.metadata["rows_by_kind"]["skip"] == 2


def test_each_program_sheet_gets_fresh_context():
    raw = build_xlsx_bytes(
        {
            "P101": [
                HEADER,
                ["Action 3 : Recherche", None, None, None, None, None, None, None, None, None],
                [None, None, None, "D09", None, "612024", "Études", 100, 100, 0],
            ],
            "P102": [
                HEADER,
                [None, None, None, None, None, "612024", "Études", 50, 50, 0],
            ],
        }
    )

    result = BudgetWorkbookParser(raw).parse()

    assert [line["program_code"] for line in result.records] == ["101", "102"]
    assert result.records[1]["action_code"] == "01"
    assert result.records[1]["admin_unit_code"] == ""

def test_compact_header_sheet_has_no_admin_or_task_context():
    raw = build_xlsx_bytes(
        {
            "PROGRAMME 118": [
                ["Paragraphe Code", "Libellé", "AE", "CP", "Engagé"],
                ["612024", "Fournitures", 1000, 800, 500],
                ["612025", "Carburant", 2000, 900, 100],
            ]
        }
    )

    result = BudgetWorkbookParser(raw).parse()

    assert result.record_count == 2
    first, second = result.records
    assert first["paragraph_name"] == "Fournitures"
    assert (first["ae"], first["cp"], first["engaged"]) == (1000, 800, 500)
    assert second["ae"] == pytest.approx(2000)
    for line in result.records:
        assert line["admin_unit_code"] == ""
        assert line["task_name"] == ""
        assert line["activity_name"] == "Activité 01"



def test_validator_runs_over_extracted_lines():
    raw = build_xlsx_bytes(
        {
            "PROGRAMME 118": [
                HEADER,
                [None, None, None, None, None, "612024", "Négatif", -100, 0, 0],
                [None, None, None, None, None, "612025", "Dépassement", 100, 100, 400],
            ]
        }
    )

    result = BudgetWorkbookParser(raw).parse()

    assert [line["paragraph_code"] for line in result.records] == ["612025"]
    assert result.metadata["lines_dropped"] == 1
    assert len(result.warnings) == 1


def test_unreadable_workbook_is_reported_not_raised():
    result = BudgetWorkbookParser(b"not an excel file").parse()

    assert not result.ok
    assert result.records == []
    assert "Failed to open workbook" in result.errors[0]
