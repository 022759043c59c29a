import logging

from flask import Flask
from flask_cors import CORS

from config import Config
from web.extensions import db, migrate
from web.utils.responses import error_response

logger = logging.getLogger(__name__)


def configure_logging(level):
    """Route cutorder and web loggers through a single stream handler."""
    logging.basicConfig(
        level=level,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )


def register_error_handlers(app):
    """Answer unknown routes and server errors with the JSON error envelope."""

    @app.errorhandler(404)
    def not_found(error):
        return error_response('Not found', 404)

    @app.errorhandler(405)
    def method_not_allowed(error):
        return error_response('Method not allowed', 405)

    @app.errorhandler(500)
    def server_error(error):
        logger.exception('Unhandled error while serving request')
        return error_response('Internal server error', 500)


def create_app(config_class=Config):
    """Build the cut order service: job storage, optimizer settings and the optimization API."""
    app = Flask(__name__)
    app.config.from_object(config_class)
    configure_logging(app.config.get('LOG_LEVEL', 'INFO'))

    db.init_app(app)
    migrate.init_app(app, db)

    # Optimization endpoints are called from other tools
    CORS(app, resources={r"/api/*": {"origins": "*"}})

    # Blueprints import services, which import the models
    from web.routes.jobs import jobs_bp
    from web.routes.settings import settings_bp
    from web.routes.api import api_bp

    app.register_blueprint(jobs_bp, url_prefix='/jobs')
    app.register_blueprint(settings_bp, url_prefix='/settings')
    app.register_blueprint(api_bp, url_prefix='/api')
    register_error_handlers(app)

    logger.info("Cut order service configured with database %s", app.config['SQLALCHEMY_DATABASE_URI'])
    return app


app = create_app()

if __name__ == '__main__':
    app.run(debug=True, port=5001)
