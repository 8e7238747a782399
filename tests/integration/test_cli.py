"""
Integration Tests - Command Line Interface
"""
import polars as pl
import pytest

from gravity_books.cli import (
    EXIT_DATA_ACCESS,
    EXIT_INVALID,
    EXIT_MISSING_CALENDAR,
    EXIT_OK,
    EXIT_OUTPUT,
    main,
)


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite:///{tmp_path / 'gravity_books.db'}"


def _run(db_url, *args):
    return main(["--database-url", db_url, "--log-level", "WARNING", *args])


def _seed(db_url):
    return _run(db_url, "seed-demo", "--orders", "50", "--start", "2020-01-01", "--end", "2020-12-31")


class TestCli:
    """Tests for CLI commands and exit codes"""
    
    def test_seed_calendar_report(self, db_url, tmp_path, capsys):
        assert _seed(db_url) == EXIT_OK
        assert _run(db_url, "calendar", "--start", "2020-01-01", "--end", "2020-12-31") == EXIT_OK
        assert "366 days" in capsys.readouterr().out
        
        output = tmp_path / "report.csv"
        assert _run(db_url, "report", "--output", str(output)) == EXIT_OK
        
        df = pl.read_csv(output)
        assert df.height == 366
        assert df["num_orders"].sum() == 50
    
    def test_report_to_stdout(self, db_url, capsys):
        _seed(db_url)
        _run(db_url, "calendar", "--start", "2020-01-01", "--end", "2020-12-31")
        capsys.readouterr()
        
        assert _run(db_url, "report", "--start", "2020-03-01", "--end", "2020-03-07") == EXIT_OK
        
        lines = capsys.readouterr().out.strip().splitlines()
        assert lines[0].startswith("calendar_date,")
        assert len(lines) == 8
    
    def test_inverted_calendar_range(self, db_url):
        assert _run(db_url, "calendar", "--start", "2020-12-31", "--end", "2020-01-01") == EXIT_INVALID
    
    def test_report_without_calendar(self, db_url):
        _seed(db_url)
        
        assert _run(db_url, "report") == EXIT_MISSING_CALENDAR
    
    def test_report_start_after_calendar(self, db_url):
        _seed(db_url)
        _run(db_url, "calendar", "--start", "2020-01-01", "--end", "2020-12-31")
        
        assert _run(db_url, "report", "--start", "2021-06-01") == EXIT_MISSING_CALENDAR
    
    def test_report_on_empty_database(self, db_url):
        assert _run(db_url, "report") == EXIT_DATA_ACCESS
    
    def test_bad_database_url(self):
        assert _run("notadriver://nowhere", "report") == EXIT_DATA_ACCESS
    
    def test_unsupported_output_format(self, db_url, tmp_path):
        _seed(db_url)
        _run(db_url, "calendar", "--start", "2020-01-01", "--end", "2020-12-31")
        
        assert _run(db_url, "report", "--output", str(tmp_path / "report.xlsx")) == EXIT_INVALID
    
    def test_view_export(self, db_url, tmp_path):
        _seed(db_url)
        output = tmp_path / "details.parquet"
        
        assert _run(db_url, "view", "order-details", "--output", str(output)) == EXIT_OK
        assert pl.read_parquet(output).height > 0
    
    def test_view_export_creates_directories(self, db_url, tmp_path):
        _seed(db_url)
        output = tmp_path / "exports" / "cities.csv"
        
        assert _run(db_url, "view", "orders-by-city", "--output", str(output)) == EXIT_OK
        assert output.exists()
    
    def test_unwritable_output(self, db_url, tmp_path):
        _seed(db_url)
        _run(db_url, "calendar", "--start", "2020-01-01", "--end", "2020-12-31")
        blocker = tmp_path / "taken"
        blocker.write_text("not a directory")
        
        assert _run(db_url, "report", "--output", str(blocker / "report.csv")) == EXIT_OUTPUT
        assert _run(db_url, "view", "book-orders", "--output", str(blocker / "books.csv")) == EXIT_OUTPUT
    
    def test_invalid_date_argument(self, db_url):
        with pytest.raises(SystemExit) as exc_info:
            _run(db_url, "calendar", "--start", "2020-13-01")
        
        assert exc_info.value.code == 2
