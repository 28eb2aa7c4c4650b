"""Roster file parsing (CSV or Excel) into students with risk assessments."""

import logging
import re
from io import BytesIO
from typing import Dict, List

import numpy as np
import pandas as pd
from pydantic import ValidationError

from app.errors import RosterError
from app.models import RiskFactors, Student

logger = logging.getLogger(__name__)

FACTOR_COLUMNS = ['attendance', 'academic_performance', 'fee_payment', 'engagement']

# Standard column -> accepted spellings (already normalized)
COLUMN_VARIATIONS: Dict[str, List[str]] = {
    'id': ['id', 'student id', 'studentid', 'student#', 'student number'],
    'name': ['name', 'student name', 'studentname', 'student'],
    'roll_no': ['roll no', 'rollno', 'roll number', 'roll', 'enrollment no'],
    'branch': ['branch', 'department', 'dept', 'program', 'program name'],
    'last_session': ['last session', 'lastsession', 'last counseling session'],
    'attendance': ['attendance', 'attendance %', 'attendance pct', 'attended %'],
    'academic_performance': ['academic performance', 'academicperformance', 'academic', 'grade', 'grade %'],
    'fee_payment': ['fee payment', 'feepayment', 'fees paid', 'fee paid %', 'fee'],
    'engagement': ['engagement', 'engagement score', 'participation'],
}

REQUIRED_COLUMNS = ['name', 'roll_no'] + FACTOR_COLUMNS


def normalize_col_name(col_name) -> str:
    """Lowercase, trim, turn . _ - , into spaces, collapse whitespace."""
    if pd.isna(col_name):
        return ""
    normalized = str(col_name).strip().lower()
    normalized = re.sub(r'[._\-,]', ' ', normalized)
    normalized = re.sub(r'\s+', ' ', normalized)
    return normalized.strip()


def normalize_and_rename_columns(df: pd.DataFrame) -> pd.DataFrame:
    """
    Map spelling variants of roster headers onto the standard names.

    Args:
        df: Raw roster DataFrame

    Returns:
        Copy of df with standard column names; unknown columns are kept
    """
    df = df.copy()
    rename = {}
    for orig_col in df.columns:
        normalized = normalize_col_name(orig_col)
        for target, variations in COLUMN_VARIATIONS.items():
            if normalized == target.replace('_', ' ') or normalized in variations:
                if target not in rename.values():
                    rename[orig_col] = target
                break
    if rename:
        logger.debug("Renaming roster columns: %s", rename)
    return df.rename(columns=rename)


def parse_pct(x) -> float:
    """Parse a percentage cell ("85", "85%", 85.0); blanks become NaN."""
    if x is None or (not isinstance(x, str) and pd.isna(x)):
        return np.nan
    if isinstance(x, str):
        val_str = x.strip().replace('%', '').strip()
        if not val_str:
            return np.nan
        try:
            return float(val_str)
        except ValueError:
            raise RosterError(f"Not a percentage: '{x}'")
    return float(x)


def normalize_percentage_column(series: pd.Series) -> pd.Series:
    """
    Parse a factor column to 0-100.

    A column whose values all lie within 0-1 is read as fractions and
    scaled by 100; anything else is taken as already in percent.
    """
    values = series.map(parse_pct).astype(float)
    present = values.dropna()
    if len(present) and present.min() >= 0.0 and present.max() <= 1.0:
        return values * 100.0
    return values


def read_roster_frame(file_bytes: bytes, filename: str) -> pd.DataFrame:
    """Load a .csv, .xlsx or .xls roster into a DataFrame."""
    name = filename.lower()
    try:
        if name.endswith('.csv'):
            return pd.read_csv(BytesIO(file_bytes))
        if name.endswith(('.xlsx', '.xls')):
            return pd.read_excel(BytesIO(file_bytes), engine='openpyxl')
    except Exception as e:
        raise RosterError(f"Could not read roster file '{filename}': {e}") from e
    raise RosterError("Invalid file type. Please upload a CSV or Excel file (.csv, .xlsx, .xls)")


def normalize_roster(df: pd.DataFrame) -> pd.DataFrame:
    """Standard columns, parsed percentages and filled optional fields."""
    df = normalize_and_rename_columns(df)
    df = df.dropna(how='all')

    missing = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing:
        raise RosterError(f"Roster is missing required columns: {missing}. Found: {list(df.columns)}")

    for col in FACTOR_COLUMNS:
        df[col] = normalize_percentage_column(df[col])

    if 'id' not in df.columns:
        df['id'] = range(1, len(df) + 1)
    if 'branch' not in df.columns:
        df['branch'] = 'Unassigned'
    if 'last_session' not in df.columns:
        df['last_session'] = 'Never'

    df['name'] = df['name'].astype(str).str.strip()
    df['roll_no'] = df['roll_no'].astype(str).str.strip()
    df['branch'] = df['branch'].fillna('Unassigned').astype(str).str.strip()
    df['last_session'] = df['last_session'].fillna('Never').astype(str).str.strip()

    duplicated = df['roll_no'][df['roll_no'].duplicated()].tolist()
    if duplicated:
        raise RosterError(f"Duplicate roll numbers in roster: {duplicated}")
    return df.reset_index(drop=True)


def load_roster(file_bytes: bytes, filename: str) -> List[Student]:
    """
    Parse an uploaded roster into students with fresh risk assessments.

    Out-of-range or blank factor values reject the whole file, naming
    the row and field; nothing is clamped.
    """
    df = normalize_roster(read_roster_frame(file_bytes, filename))
    if df.empty:
        raise RosterError("No student records found in the uploaded file.")

    students = []
    for idx, row in df.iterrows():
        blank = [col for col in FACTOR_COLUMNS if pd.isna(row[col])]
        if blank:
            raise RosterError(f"Row {idx + 2} ({row['roll_no']}): missing {', '.join(blank)}")
        try:
            factors = RiskFactors(**{col: row[col] for col in FACTOR_COLUMNS})
            students.append(Student.from_factors(
                factors,
                id=int(row['id']),
                name=row['name'],
                roll_no=row['roll_no'],
                branch=row['branch'],
                last_session=row['last_session'],
            ))
        except ValidationError as e:
            fields = ', '.join(str(err['loc'][0]) for err in e.errors() if err['loc'])
            raise RosterError(f"Row {idx + 2} ({row['roll_no']}): invalid {fields}") from e
        except (TypeError, ValueError) as e:
            raise RosterError(f"Row {idx + 2} ({row['roll_no']}): {e}") from e

    logger.info("Loaded %d students from %s", len(students), filename)
    return students
