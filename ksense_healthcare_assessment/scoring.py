"""
Risk rubric for a single patient record.

Each of blood pressure, temperature and age is parsed into a ParsedValue.
A field that fails to parse marks the record invalid and adds nothing to
the score; the other fields are still scored.
"""

import math
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

FEVER_THRESHOLD = 99.6
HIGH_FEVER_THRESHOLD = 101.0

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_DECIMAL = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|[+-]?Infinity")
_PREFIXED_INT = re.compile(r"0[xX][0-9a-fA-F]+|0[oO][0-7]+|0[bB][01]+")


@dataclass(frozen=True)
class ParsedValue:
    valid: bool
    value: Any = None


INVALID = ParsedValue(False)


@dataclass(frozen=True)
class Classification:
    id: Any
    total_risk: int
    is_fever: bool
    is_invalid: bool


def _is_blank(raw):
    return raw is None or (isinstance(raw, str) and raw.strip() == "")


def _leading_int(text):
    # "120mmHg" -> 120, "45.9" -> 45, "abc" -> None
    m = _LEADING_INT.match(text)
    if not m:
        return None
    digits = m.group(1)
    try:
        return int(digits)
    except ValueError:
        # past the int() digit limit; a signed infinity keeps the tier ordering
        return math.copysign(math.inf, -1 if digits.startswith("-") else 1)


def _int_to_float(value):
    try:
        return float(value)
    except OverflowError:
        return -math.inf if value < 0 else math.inf


def _to_number(raw):
    """Numeric value of raw, or NaN. Strings accept decimal, exponent,
    Infinity and 0x/0o/0b forms; "1_000" and "inf" are not numbers."""
    if isinstance(raw, bool):
        return float(raw)
    if isinstance(raw, int):
        return _int_to_float(raw)
    if isinstance(raw, float):
        return raw
    if not isinstance(raw, str):
        return math.nan

    text = raw.strip()
    if _DECIMAL.fullmatch(text):
        return float(text)
    if _PREFIXED_INT.fullmatch(text):
        return _int_to_float(int(text, 0))
    return math.nan


def parse_bp(bp_str):
    """Parse "<systolic>/<diastolic>" into a ParsedValue of two ints."""
    if not isinstance(bp_str, str) or not bp_str or "/" not in bp_str:
        return INVALID
    parts = bp_str.split("/")
    if len(parts) != 2 or parts[0].strip() == "" or parts[1].strip() == "":
        return INVALID
    systolic = _leading_int(parts[0])
    diastolic = _leading_int(parts[1])
    if systolic is None or diastolic is None:
        return INVALID
    return ParsedValue(True, (systolic, diastolic))


def parse_temp(temp):
    # null, blank and non-numeric are checked separately: " " is blank, "abc" is NaN
    if temp is None or _is_blank(temp):
        return INVALID
    value = _to_number(temp)
    if math.isnan(value):
        return INVALID
    return ParsedValue(True, value)


def parse_age(age):
    if age is None or _is_blank(age):
        return INVALID
    if isinstance(age, int) and not isinstance(age, bool):
        return ParsedValue(True, age)
    value = _leading_int(str(age))
    if value is None:
        return INVALID
    return ParsedValue(True, value)


def systolic_tier(systolic):
    if systolic >= 140:
        return 3
    if systolic >= 130:
        return 2
    if systolic >= 120:
        return 1
    return 0


def diastolic_tier(diastolic):
    if diastolic >= 90:
        return 3
    if diastolic >= 80:
        return 2
    return 0


def score_bp(systolic, diastolic):
    # the worse of the two readings decides the stage
    return max(systolic_tier(systolic), diastolic_tier(diastolic))


def score_temp(temp):
    if temp >= HIGH_FEVER_THRESHOLD:
        return 2
    if temp >= FEVER_THRESHOLD:
        return 1
    return 0


def score_age(age):
    if age > 65:
        return 2
    if age >= 40:
        return 1
    return 0


def calculate_score(patient) -> Classification:
    """Classify one raw patient record. Never raises on malformed fields."""
    if not isinstance(patient, Mapping):
        patient = {}
    risk = 0
    invalid = False
    fever = False

    bp = parse_bp(patient.get("blood_pressure"))
    if bp.valid:
        risk += score_bp(*bp.value)
    else:
        invalid = True

    temp = parse_temp(patient.get("temperature"))
    if temp.valid:
        fever = temp.value >= FEVER_THRESHOLD
        risk += score_temp(temp.value)
    else:
        invalid = True

    age = parse_age(patient.get("age"))
    if age.valid:
        risk += score_age(age.value)
    else:
        invalid = True

    return Classification(
        id=patient.get("patient_id"),
        total_risk=risk,
        is_fever=fever,
        is_invalid=invalid,
    )
