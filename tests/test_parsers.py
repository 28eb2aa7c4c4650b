"""Unit tests for parsers module."""

from io import BytesIO

import numpy as np
import pandas as pd
import pytest

from app.errors import RosterError
from app.models import RiskLevel
from app.parsers import (
    load_roster,
    normalize_and_rename_columns,
    normalize_percentage_column,
    normalize_roster,
    parse_pct
)

ROSTER_CSV = b"""Student ID,Student Name,Roll No,Department,Attendance %,Academic Performance,Fee Payment,Engagement,Last Session
1,Alice Johnson,CS21001,CSE,65%,68,40,55,2 days ago
2,"Smith, Bob",CS21002,CSE,78,72,90,65,1 week ago
3,Carol Davis,CS21003,CSE,92,88,100,85,
"""


def test_parse_pct():
    """Test percentage parsing."""
    assert parse_pct("85") == 85.0
    assert parse_pct("85%") == 85.0
    assert parse_pct(" 72.5 % ") == 72.5
    assert parse_pct(40) == 40.0
    assert np.isnan(parse_pct(""))
    assert np.isnan(parse_pct(None))
    assert np.isnan(parse_pct(np.nan))

    with pytest.raises(RosterError):
        parse_pct("high")


def test_normalize_percentage_column():
    """Fraction columns are scaled, percent columns left alone."""
    fractions = normalize_percentage_column(pd.Series([0.65, 0.9, 1.0]))
    assert fractions.tolist() == pytest.approx([65.0, 90.0, 100.0])

    percents = normalize_percentage_column(pd.Series(["65%", "90", 100]))
    assert percents.tolist() == [65.0, 90.0, 100.0]

    # Out-of-range values pass through untouched so validation can reject them
    assert normalize_percentage_column(pd.Series([50, 120])).tolist() == [50.0, 120.0]


def test_normalize_and_rename_columns():
    df = pd.DataFrame(columns=['Student Name', 'ROLL_NO', 'fee-payment', 'Academic', 'Notes'])
    renamed = normalize_and_rename_columns(df)
    assert list(renamed.columns) == ['name', 'roll_no', 'fee_payment', 'academic_performance', 'Notes']


def test_normalize_roster_fills_optional_columns():
    df = pd.DataFrame({
        'Name': ['A', 'B'],
        'Roll No': ['R1', 'R2'],
        'Attendance': [0.8, 0.6],
        'Academic Performance': [70, 50],
        'Fee Payment': [100, 90],
        'Engagement': [60, 40],
    })
    roster = normalize_roster(df)

    assert roster['id'].tolist() == [1, 2]
    assert roster['branch'].tolist() == ['Unassigned', 'Unassigned']
    assert roster['last_session'].tolist() == ['Never', 'Never']
    assert roster['attendance'].tolist() == pytest.approx([80.0, 60.0])


def test_normalize_roster_missing_columns():
    df = pd.DataFrame({'Name': ['A'], 'Roll No': ['R1'], 'Attendance': [80]})
    with pytest.raises(RosterError) as exc_info:
        normalize_roster(df)
    assert 'academic_performance' in str(exc_info.value)


def test_normalize_roster_duplicate_roll_numbers():
    df = pd.DataFrame({
        'Name': ['A', 'B'],
        'Roll No': ['R1', 'R1'],
        'Attendance': [80, 80],
        'Academic': [80, 80],
        'Fee Payment': [80, 80],
        'Engagement': [80, 80],
    })
    with pytest.raises(RosterError):
        normalize_roster(df)


def test_load_roster_csv():
    students = load_roster(ROSTER_CSV, "roster.csv")

    assert [s.roll_no for s in students] == ['CS21001', 'CS21002', 'CS21003']
    assert students[0].factors.attendance == 65.0
    assert students[0].assessment.level == RiskLevel.HIGH
    assert students[1].name == 'Smith, Bob'
    assert students[2].assessment.level == RiskLevel.LOW
    assert students[2].last_session == 'Never'


def test_load_roster_excel():
    df = pd.DataFrame({
        'Name': ['Priya Sharma'],
        'Roll No': ['CSE21001'],
        'Branch': ['CSE'],
        'Attendance': [65],
        'Academic Performance': [45],
        'Fee Payment': [80],
        'Engagement': [30],
    })
    buffer = BytesIO()
    df.to_excel(buffer, index=False, engine='openpyxl')

    students = load_roster(buffer.getvalue(), "Roster.XLSX")
    assert len(students) == 1
    assert students[0].branch == 'CSE'
    assert students[0].assessment.level == RiskLevel.HIGH


def test_load_roster_rejects_out_of_range_values():
    bad = b"Name,Roll No,Attendance,Academic,Fee Payment,Engagement\nA,R1,80,80,80,80\nB,R2,120,80,80,80\n"
    with pytest.raises(RosterError) as exc_info:
        load_roster(bad, "roster.csv")
    assert 'Row 3' in str(exc_info.value)
    assert 'attendance' in str(exc_info.value)


def test_load_roster_rejects_blank_factor():
    bad = b"Name,Roll No,Attendance,Academic,Fee Payment,Engagement\nA,R1,80,,80,80\n"
    with pytest.raises(RosterError) as exc_info:
        load_roster(bad, "roster.csv")
    assert 'academic_performance' in str(exc_info.value)


def test_load_roster_rejects_unknown_file_type():
    with pytest.raises(RosterError):
        load_roster(b"whatever", "roster.txt")


def test_load_roster_empty_file():
    with pytest.raises(RosterError):
        load_roster(b"Name,Roll No,Attendance,Academic,Fee Payment,Engagement\n", "roster.csv")
