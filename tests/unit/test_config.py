"""
Unit Tests - Configuration
"""
from datetime import date

import pytest
from pydantic import ValidationError

from gravity_books.config import Settings
from gravity_books.config.settings import CalendarSettings, DatabaseSettings


class TestSettings:
    """Tests for Settings"""
    
    def test_testing_environment(self, test_settings):
        assert test_settings.app_env == "testing"
        assert not test_settings.is_development
    
    def test_settings_fields(self):
        assert set(Settings.model_fields) == {
            "app_env", "version", "api_host", "api_port", "database", "calendar", "monitoring",
        }
        assert Settings(app_env="Development").is_development
    
    def test_invalid_environment_rejected(self):
        with pytest.raises(ValidationError):
            Settings(app_env="moon")
    
    def test_database_url_override(self):
        db = DatabaseSettings(url="sqlite:///books.db")
        
        assert db.get_url() == "sqlite:///books.db"
    
    def test_database_url_from_parts(self):
        db = DatabaseSettings(url=None, host="db", port=5433, name="books", user="u", password="p")
        
        assert db.get_url() == "postgresql+psycopg2://u:p@db:5433/books"
    
    def test_calendar_defaults(self, monkeypatch):
        monkeypatch.delenv("CALENDAR_START_DATE", raising=False)
        monkeypatch.delenv("CALENDAR_END_DATE", raising=False)
        
        calendar = CalendarSettings()
        
        assert calendar.start_date == date(2020, 1, 1)
        assert calendar.end_date is None
    
    def test_calendar_from_environment(self, monkeypatch):
        monkeypatch.setenv("CALENDAR_END_DATE", "2021-06-30")
        
        assert CalendarSettings().end_date == date(2021, 6, 30)
