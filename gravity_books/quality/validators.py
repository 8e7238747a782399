"""
Data Validation Module

Column checks over polars DataFrames, used to verify that a calendar read
back from the database still holds the dimension invariants (one row per day,
no gaps, well-formed codes) before it backs a report.

Every check counts offending rows in a single column; a suite passes only
when every check finds none.
"""

from dataclasses import dataclass, field
from typing import Callable, List, Tuple

import polars as pl
import structlog

logger = structlog.get_logger(__name__)

FailureCounter = Callable[[pl.Series], int]


@dataclass
class ValidationCheck:
    """Outcome of one column check"""
    name: str
    passed: bool
    message: str
    failed_rows: int = 0


@dataclass
class ValidationResult:
    """Outcome of a full suite"""
    checks: List[ValidationCheck] = field(default_factory=list)
    
    @property
    def passed(self) -> bool:
        return all(c.passed for c in self.checks)
    
    @property
    def failures(self) -> List[ValidationCheck]:
        """Checks that did not pass"""
        return [c for c in self.checks if not c.passed]


def _count_gaps(series: pl.Series) -> int:
    """Neighbouring sorted dates that are not exactly one day apart"""
    dates = sorted(series.drop_nulls().to_list())
    return sum(1 for prev, curr in zip(dates, dates[1:]) if (curr - prev).days != 1)


class DataValidator:
    """
    Chainable suite of column checks.
    
    Example:
        result = (
            DataValidator()
            .add_not_null_check("calendar_date")
            .add_range_check("calendar_month", 1, 12)
            .validate(df)
        )
    """
    
    def __init__(self):
        self._checks: List[Tuple[str, str, FailureCounter, str]] = []
    
    def _add(self, kind: str, column: str, count_failures: FailureCounter, problem: str) -> "DataValidator":
        self._checks.append((f"{kind}_{column}", column, count_failures, problem))
        return self
    
    def add_not_null_check(self, column: str) -> "DataValidator":
        return self._add("not_null", column, lambda s: s.null_count(), "null values")
    
    def add_unique_check(self, column: str) -> "DataValidator":
        return self._add("unique", column, lambda s: len(s) - s.n_unique(), "duplicate values")
    
    def add_range_check(self, column: str, min_value: int, max_value: int) -> "DataValidator":
        """Nulls are left to add_not_null_check"""
        return self._add(
            "range",
            column,
            lambda s: int(((s < min_value) | (s > max_value)).sum()),
            f"values outside [{min_value}, {max_value}]",
        )
    
    def add_pattern_check(self, column: str, pattern: str) -> "DataValidator":
        return self._add(
            "pattern",
            column,
            lambda s: int((~s.str.contains(pattern)).sum()),
            f"values not matching {pattern}",
        )
    
    def add_contiguous_dates_check(self, column: str) -> "DataValidator":
        return self._add("contiguous", column, _count_gaps, "gaps or repeated days")
    
    def validate(self, df: pl.DataFrame) -> ValidationResult:
        """Run every check against ``df``"""
        result = ValidationResult()
        
        for name, column, count_failures, problem in self._checks:
            if column not in df.columns:
                check = ValidationCheck(name=name, passed=False, message=f"Column '{column}' not found")
            else:
                failed = count_failures(df[column])
                check = ValidationCheck(
                    name=name,
                    passed=failed == 0,
                    message=f"Column '{column}' has {failed} {problem}" if failed else "ok",
                    failed_rows=failed,
                )
            if not check.passed:
                logger.warning(f"Validation failed: {name}", message=check.message)
            result.checks.append(check)
        
        logger.debug("Validation finished", checks=len(result.checks), failed=len(result.failures))
        return result


def create_calendar_validator() -> DataValidator:
    """Checks every calendar table must satisfy before it backs a report"""
    return (
        DataValidator()
        .add_not_null_check("calendar_date")
        .add_unique_check("calendar_date")
        .add_contiguous_dates_check("calendar_date")
        .add_range_check("calendar_month", 1, 12)
        .add_range_check("calendar_day", 1, 31)
        .add_range_check("day_of_week_num", 1, 7)
        .add_pattern_check("date_num", r"^\d{8}$")
        .add_pattern_check("quarter_cd", r"^\d{4}Q[1-4]$")
    )
