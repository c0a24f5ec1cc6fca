"""Tests for the run.py entry point module."""

from unittest.mock import patch

from analyze_fastapi.run import main


def test_main_calls_uvicorn_with_correct_parameters() -> None:
    with patch("analyze_fastapi.run.uvicorn.run") as mock_uvicorn_run:
        with patch("analyze_fastapi.run.settings") as mock_settings:
            mock_settings.SERVER_HOST = "127.0.0.1"
            mock_settings.SERVER_PORT = 8080
            mock_settings.LOG_LEVEL = "DEBUG"

            main()

            mock_uvicorn_run.assert_called_once_with(
                "analyze_fastapi.app.main:app",
                host="127.0.0.1",
                port=8080,
                log_level="debug",
                reload=True,
            )


def test_main_uses_default_settings() -> None:
    with patch("analyze_fastapi.run.uvicorn.run") as mock_uvicorn_run:
        main()

        mock_uvicorn_run.assert_called_once()
        call_args = mock_uvicorn_run.call_args
        assert call_args[1]["reload"] is True
        assert "analyze_fastapi.app.main:app" in call_args[0]
