from dataclasses import dataclass

from flask import Flask
from flask_cors import CORS

from .config import Config
from .services.actuation_service import ActuationService
from .services.history_buffer import HistoryBuffer
from .services.reading_source import ReadingSource
from .services.status_service import StatusService


@dataclass
class Services:
    reading_source: ReadingSource
    history: HistoryBuffer
    actuation: ActuationService
    status: StatusService


def build_services(config) -> Services:
    source = ReadingSource(
        config["SENSOR_COMMAND"],
        timeout=config["ACQUIRE_TIMEOUT"],
        max_concurrent=config["MAX_CONCURRENT_ACQUISITIONS"],
    )
    history = HistoryBuffer(config["HISTORY_CAPACITY"])
    return Services(
        reading_source=source,
        history=history,
        actuation=ActuationService(source),
        status=StatusService(history),
    )


def create_app(overrides=None):
    app = Flask(
        __name__,
        template_folder="../frontend/templates",
        static_folder="../frontend/static"
    )
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    CORS(app)
    app.extensions["irrigation"] = build_services(app.config)

    from .controllers.api import api_bp
    from .controllers.views import views_bp

    app.register_blueprint(api_bp, url_prefix="/api")
    app.register_blueprint(views_bp)

    return app
