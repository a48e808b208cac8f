"""Virtual Parent entry point.

Integrated mode serves the persistence API and the chat UI from one uvicorn
server. Separate mode runs the API here and the UI in a child process that
is pointed back at this API. Settings come from the environment (see
``src.config``).
"""

import logging
import os
import subprocess
import sys

from src.config import ServerConfig, get_server_config

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def _check_completion_config() -> None:
    """Exit early when the completion provider is not configured."""
    from src.agent.completion import get_completion_service

    try:
        get_completion_service()
    except ValueError as e:
        logger.error(f"Invalid completion configuration: {e}")
        sys.exit(1)


def run_integrated(config: ServerConfig) -> None:
    """Serve the API with the chat UI mounted on the same port."""
    import uvicorn
    from nicegui import ui

    from src.api.app import create_app
    from src.ui.chat_page import chat_page  # noqa: F401 - Registers the page

    # The UI's persistence client must reach the API on the port actually served
    os.environ["API_BASE_URL"] = config.persistence_url
    _check_completion_config()

    app = create_app()
    ui.run_with(app, title="Virtual Parent", storage_secret=config.storage_secret)

    logger.info(f"Chat UI and API on {config.local_api_url}")
    logger.info(f"Persistence API used by the UI: {config.persistence_url}")

    uvicorn.run(
        app,
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )


def run_separate(config: ServerConfig) -> None:
    """Serve the API here and the chat UI from a child process.

    The child gets ``PORT`` set to the UI port and ``API_BASE_URL`` set to
    this API, and is stopped when the API server exits.
    """
    import uvicorn

    from src.api.app import create_app

    _check_completion_config()

    ui_proc = subprocess.Popen(
        [sys.executable, "-m", "src.ui.chat_page"],
        env=config.ui_environment(),
    )
    logger.info(f"Chat UI on http://127.0.0.1:{config.ui_port} (pid {ui_proc.pid})")
    logger.info(f"Persistence API on {config.local_api_url}")

    try:
        uvicorn.run(
            create_app(),
            host=config.host,
            port=config.port,
            log_level=config.log_level.lower(),
        )
    finally:
        logger.info("Stopping chat UI...")
        ui_proc.terminate()
        try:
            ui_proc.wait(timeout=10)
        except subprocess.TimeoutExpired:
            ui_proc.kill()


def main() -> None:
    """Application entry point. ``RUN_MODE`` selects the mode."""
    try:
        config = get_server_config()
    except ValueError as e:
        configure_logging("INFO")
        logger.error(f"Invalid server configuration: {e}")
        sys.exit(1)

    configure_logging(config.log_level)
    logger.info(f"Starting Virtual Parent in {config.run_mode} mode")

    if config.run_mode == "separate":
        run_separate(config)
    else:
        run_integrated(config)


if __name__ == "__main__":
    main()
