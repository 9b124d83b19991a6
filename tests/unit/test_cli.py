"""Tests for the ``galleria`` console entry point."""

from __future__ import annotations

from unittest.mock import patch

from galleria.api import main as main_module


def test_main_runs_uvicorn_with_config():
    """main() hands the app import path, host and port to uvicorn."""
    with patch("uvicorn.run") as run:
        main_module.main()

    run.assert_called_once_with(
        "galleria.api.main:app",
        host=main_module.config.server_host,
        port=main_module.config.server_port,
        reload=False,
    )
