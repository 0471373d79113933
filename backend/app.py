import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _wants_eventlet() -> bool:
    # eventlet does not support Windows or Python 3.13+.
    mode = os.environ.get("SOCKETIO_ASYNC_MODE", "").strip()
    return (
        not sys.platform.startswith("win")
        and sys.version_info < (3, 13)
        and mode in ("", "eventlet")
    )


def main() -> None:
    # Before importing the package: Config reads the environment at import.
    load_dotenv(Path(__file__).resolve().parents[1] / ".env")

    if _wants_eventlet():
        import eventlet

        eventlet.monkey_patch()

    try:
        from backend.huroof.config import Config
        from backend.huroof.server import create_app
    except ImportError:  # pragma: no cover
        from huroof.config import Config
        from huroof.server import create_app

    logging.basicConfig(level=Config.LOG_LEVEL.upper(), format=LOG_FORMAT)

    app, socketio = create_app(Config)

    socketio.run(
        app,
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "5000")),
        debug=os.environ.get("FLASK_DEBUG", "1") == "1",
        allow_unsafe_werkzeug=os.environ.get("ALLOW_UNSAFE_WERKZEUG", "1") == "1",
        use_reloader=os.environ.get("FLASK_USE_RELOADER", "0") == "1",
    )


if __name__ == "__main__":
    main()
