import logging

from flask import Flask
from flask_cors import CORS

from kennel.config import config
from kennel.errors import register_error_handlers
from kennel.extensions import db, ma, migrate, scheduler


def configure_logging(app):
    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app.logger.setLevel(level)


def configure_scheduler(app):
    """Start the nightly status reconciliation (not under testing)."""
    if app.config.get('TESTING') or app.config.get('SCHEDULER_INITIALIZED', False):
        return
    try:
        scheduler.init_app(app)
    except Exception as e:
        # the reloader imports the app twice
        if "already" not in str(e):
            raise

    @scheduler.task('cron', id='sync_all_dogs_status', hour=app.config['STATUS_SYNC_HOUR'], minute=0,
                    replace_existing=True)
    def sync_all_dogs_status_job():
        from domain.dogs.services import sync_all_dogs_status
        from infrastructure.db.repository import get_repository

        with app.app_context():
            try:
                changed = sync_all_dogs_status(get_repository())
                app.logger.info("Nightly status sync updated %s dogs", len(changed))
            except Exception:
                app.logger.exception("Nightly status sync failed")
                raise

    if not scheduler.running:
        scheduler.start()
    app.config['SCHEDULER_INITIALIZED'] = True


def create_app(config_name='default', **overrides):
    app = Flask(__name__)
    app.config.from_object(config[config_name])
    app.config.update(overrides)

    configure_logging(app)

    db.init_app(app)
    ma.init_app(app)
    migrate.init_app(app, db)
    CORS(app, resources={r"/api/*": {
        "origins": app.config['CORS_ORIGINS'],
        "allow_headers": ["Content-Type"],
        "methods": ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
    }})

    register_error_handlers(app)

    from kennel.routes.assignments import assignments_bp
    from kennel.routes.classes import classes_bp
    from kennel.routes.dogs import dogs_bp
    from kennel.routes.forecast import forecast_bp
    from kennel.routes.trainers import trainers_bp

    app.register_blueprint(assignments_bp, url_prefix="/api/assignments")
    app.register_blueprint(classes_bp, url_prefix="/api/classes")
    app.register_blueprint(dogs_bp, url_prefix="/api/dogs")
    app.register_blueprint(forecast_bp, url_prefix="/api/forecast")
    app.register_blueprint(trainers_bp, url_prefix="/api/trainers")

    configure_scheduler(app)

    return app
