"""
Tests for the shared foundation: logging and configuration.
"""

import logging
from pathlib import Path

import pytest
from pydantic import ValidationError as PydanticValidationError
from rich.logging import RichHandler

from dub_info.dub_info.logging import (
    setup_logging, get_logger, set_log_level,
    DubInfoError, ConfigError, FileError, ValidationError, FormatError,
    FetchError, FetchConnectionError, RateLimitedError, ServerError, ResponseError,
    FetchCancelledError,
)
from dub_info.dub_info.config import (
    setup_config, get_config, AniSearchConfig, LoggingConfig, get_anisearch_config,
)


class TestLogging:
    """Test the centralized logging system."""

    def test_setup_logging(self, tmp_path):
        log_file = str(tmp_path / "test.log")

        logger_instance = setup_logging(log_file)

        assert logger_instance.log_file == log_file
        # The file only appears once something is logged
        assert not Path(log_file).exists()
        get_logger("test.module").warning("first record")
        assert Path(log_file).exists()

    def test_replacing_log_file_closes_previous_handlers(self, tmp_path):
        setup_logging(str(tmp_path / "default.log"))
        get_logger("test.module").warning("written to the default file")
        old_file_handler = [h for h in logging.getLogger().handlers if isinstance(h, logging.FileHandler)][0]

        setup_logging(str(tmp_path / "custom.log"))

        assert old_file_handler.stream is None
        assert old_file_handler not in logging.getLogger().handlers
        file_handlers = [h for h in logging.getLogger().handlers if isinstance(h, logging.FileHandler)]
        assert len(file_handlers) == 1
        assert file_handlers[0].baseFilename == str(tmp_path / "custom.log")
        assert len([h for h in logging.getLogger().handlers if isinstance(h, RichHandler)]) == 1

    def test_unused_log_file_is_never_created(self, tmp_path):
        setup_logging(str(tmp_path / "unused.log"))
        setup_logging(str(tmp_path / "used.log"))

        assert not (tmp_path / "unused.log").exists()

    def test_get_logger(self):
        logger = get_logger("test.module")
        assert logger.name == "test.module"
        assert len(logger.handlers) == 0  # Should use root handlers

    def test_log_levels(self, tmp_path):
        setup_logging(str(tmp_path / "levels.log"))

        set_log_level("DEBUG", "console")
        assert logging.getLogger().level == logging.DEBUG

        set_log_level("INFO", "file")
        file_handlers = [h for h in logging.getLogger().handlers if isinstance(h, logging.FileHandler)]
        assert file_handlers[0].level == logging.INFO

    def test_exception_hierarchy(self):
        for error in (ConfigError, FileError, ValidationError, FetchError):
            assert issubclass(error, DubInfoError)
        assert issubclass(FormatError, ValidationError)
        for error in (FetchConnectionError, RateLimitedError, ServerError, ResponseError, FetchCancelledError):
            assert issubclass(error, FetchError)

        error = ServerError("aniSearch is down", url="https://anisearch.com/anime/1")
        assert error.url == "https://anisearch.com/anime/1"
        assert str(error) == "aniSearch is down"


class TestConfiguration:
    """Test the centralized configuration system."""

    def test_default_config(self):
        config = setup_config()

        assert config.anisearch.timeout == 20
        assert config.anisearch.connect_timeout == 20
        assert config.anisearch.max_retries is None
        assert config.anisearch.page_delay == 1.0
        assert config.anisearch.backoff_cap == 300
        assert config.database_path.name == "anime-offline-database-minified.json"
        assert config.output_path.name == "dubInfo.json"
        assert config.logging.log_file == "dub_info.log"
        assert set(LoggingConfig.model_fields) == {"file_level", "console_level", "log_file"}

    def test_config_overrides(self, tmp_path):
        config = setup_config(output_path=tmp_path / "out.json", database_path=None)

        assert config.output_path == tmp_path / "out.json"
        assert get_config() is config

    def test_config_from_env_vars(self, monkeypatch):
        monkeypatch.setenv("ANISEARCH_LANGUAGE", "english")
        monkeypatch.setenv("ANISEARCH_MAX_RETRIES", "5")
        monkeypatch.setenv("LOG_CONSOLE_LEVEL", "debug")

        config = setup_config()

        assert config.anisearch.language == "en"
        assert config.anisearch.max_retries == 5
        assert config.logging.console_level == "DEBUG"
        assert get_anisearch_config() is config.anisearch
        assert get_config() is config

    def test_language_accepts_codes(self):
        assert AniSearchConfig(language="FR").language == "fr"
        assert AniSearchConfig(language="italian").language == "it"

    def test_invalid_values(self):
        with pytest.raises(PydanticValidationError):
            AniSearchConfig(language="klingon")
        with pytest.raises(PydanticValidationError):
            AniSearchConfig(max_retries=-1)
        with pytest.raises(PydanticValidationError):
            LoggingConfig(file_level="LOUD")
        with pytest.raises(PydanticValidationError):
            LoggingConfig(console_level="LOUD")

    def test_get_config_loads_once(self):
        setup_config()
        assert get_config() is get_config()
