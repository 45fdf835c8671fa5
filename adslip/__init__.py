import atexit

from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_migrate import Migrate
from .config import Config
from .log import configure_logging

db = SQLAlchemy()
login_manager = LoginManager()
migrate = Migrate()

def create_app(test_config=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    configure_logging(app.config["LOG_LEVEL"])

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    # Import models so Alembic can see them
    from . import models  # noqa: F401

    # Process-wide OCR handle; Tesseract is only probed on first use
    from .ocr import OcrEngine
    from .extraction import AmountExtractor
    ocr_engine = OcrEngine.from_config(app.config)
    app.extensions["adslip_ocr"] = ocr_engine
    atexit.register(ocr_engine.shutdown)
    app.extensions["adslip_extractor"] = AmountExtractor.from_config(app.config, ocr_engine)

    # Register blueprints
    from .auth.routes import auth_bp
    from .api.routes import api_bp
    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(api_bp, url_prefix="/api")

    from .commands import backfill_hashes
    app.cli.add_command(backfill_hashes)

    # Create DB tables on first run (SQLite dev convenience)
    with app.app_context():
        db.create_all()

    return app
