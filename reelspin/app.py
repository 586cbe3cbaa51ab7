from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

import uuid
from http import HTTPStatus

from flask import Flask, jsonify, g, current_app
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException as WerkzeugHTTPException

from reelspin.config import Config
from reelspin.error_codes import ErrorCodes
from reelspin.exceptions import AppException, ValidationException, InternalServerErrorException
from reelspin.logging_setup import configure_logging
from reelspin.utils.game_config_manager import MachineConfigManager
from reelspin.utils.random_source import RandomSource


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.json.sort_keys = app.config.get('JSON_SORT_KEYS', False)

    configure_logging(app.config['LOG_LEVEL'], app.config['JSON_LOGS'])
    MachineConfigManager.configure(app.config['MACHINES_DIR'], app.config['CONFIG_CACHE_TTL'])
    app.extensions['reelspin_rng'] = RandomSource(app.config.get('RNG_SEED'))

    @app.before_request
    def assign_request_id():
        g.request_id = str(uuid.uuid4())

    register_error_handlers(app)

    from reelspin.routes.spin import spin_bp
    app.register_blueprint(spin_bp)

    return app


def _error_response(exc):
    payload = {'request_id': g.get('request_id', 'N/A')}
    payload.update(exc.to_dict())
    return jsonify(payload), exc.status_code


def register_error_handlers(app):

    @app.errorhandler(AppException)
    def handle_app_exception(e):
        request_id = g.get('request_id', 'N/A')
        log = current_app.logger.error if e.status_code >= 500 else current_app.logger.warning
        log(f"Request ID: {request_id} - {type(e).__name__}: {e.status_message} - Error Code: {e.error_code}")
        return _error_response(e)

    @app.errorhandler(ValidationError)
    def handle_validation_error(e):
        # Marshmallow's ValidationError from request parsing
        current_app.logger.warning(
            f"Request ID: {g.get('request_id', 'N/A')} - Validation error: {e.messages} - Error Code: {ErrorCodes.VALIDATION_ERROR}"
        )
        return _error_response(ValidationException('Input validation failed.', {'errors': e.messages}))

    @app.errorhandler(WerkzeugHTTPException)
    def handle_http_exception(e):
        error_code = ErrorCodes.NOT_FOUND if e.code == HTTPStatus.NOT_FOUND else ErrorCodes.GENERIC_ERROR
        return _error_response(AppException(error_code, e.description, e.code))

    @app.errorhandler(Exception)
    def handle_unexpected_exception(e):
        current_app.logger.critical(
            f"Request ID: {g.get('request_id', 'N/A')} - Unhandled exception: {type(e).__name__}",
            exc_info=True
        )
        return _error_response(InternalServerErrorException('An unexpected error occurred.'))
