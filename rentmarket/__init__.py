import logging

from flask import Flask, jsonify

from .config import Config
from .controllers.bookings import bp as bookings_bp
from .controllers.vehicles import bp as vehicles_bp
from .controllers.views import bp as views_bp
from .exceptions import MarketplaceError
from .models.store import Store
from .services.notification_service import NotificationService

logger = logging.getLogger(__name__)


def create_app(config=None):
    app = Flask(__name__)
    app.config.from_object(config or Config)
    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    Store.instance(app.config.get("DATA_PATH") or None)  # load data.pkl or start empty
    NotificationService.configure(enabled=app.config.get("NOTIFICATIONS_ENABLED", True))

    app.register_blueprint(views_bp)
    app.register_blueprint(vehicles_bp)
    app.register_blueprint(bookings_bp)

    @app.errorhandler(MarketplaceError)
    def handle_marketplace_error(err):
        logger.info("%s: %s", type(err).__name__, err.message)
        return jsonify({"error": err.message}), err.status_code

    return app
