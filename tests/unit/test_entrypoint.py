"""Unit tests for the uvicorn entry point in main.py."""

import pytest
from pytest_mock import MockerFixture, MockType

import main
from magazenn.core.config import Settings


@pytest.fixture
def mock_uvicorn_run(mocker: MockerFixture) -> MockType:
    return mocker.patch("main.uvicorn.run")


@pytest.fixture(autouse=True)
def mock_setup_logging(mocker: MockerFixture) -> MockType:
    return mocker.patch("main.setup_logging")


@pytest.mark.unit
class TestMain:
    """Tests for main()."""

    def test_runs_with_settings(
        self,
        mock_settings: Settings,
        mock_uvicorn_run: MockType,
        mocker: MockerFixture,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.delenv("PORT", raising=False)
        mocker.patch("main.get_settings", return_value=mock_settings)

        main.main()

        mock_uvicorn_run.assert_called_once_with(
            "magazenn.api.main:app",
            host="127.0.0.1",
            port=3000,
            reload=False,
            log_config=main.UVICORN_LOG_CONFIG,
        )

    def test_port_env_overrides_settings(
        self,
        mock_settings: Settings,
        mock_uvicorn_run: MockType,
        mocker: MockerFixture,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("PORT", "9090")
        mocker.patch("main.get_settings", return_value=mock_settings)

        main.main()

        assert mock_uvicorn_run.call_args.kwargs["port"] == 9090

    def test_debug_enables_reload(
        self,
        mock_uvicorn_run: MockType,
        mocker: MockerFixture,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("DEBUG", "true")
        monkeypatch.delenv("PORT", raising=False)
        mocker.patch("main.get_settings", return_value=Settings())

        main.main()

        assert mock_uvicorn_run.call_args.kwargs["reload"] is True

    def test_uvicorn_loggers_are_intercepted(self) -> None:
        handler = main.UVICORN_LOG_CONFIG["handlers"]["default"]  # type: ignore[index]
        assert handler["class"] == "magazenn.core.logging.InterceptHandler"
