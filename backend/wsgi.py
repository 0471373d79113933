import logging

try:
    from backend.huroof.config import Config
    from backend.huroof.server import create_app
except ImportError:  # pragma: no cover
    from huroof.config import Config
    from huroof.server import create_app

logging.basicConfig(level=Config.LOG_LEVEL.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app, socketio = create_app(Config)
