import os
from flask import Flask, Response, jsonify, request
from werkzeug.exceptions import HTTPException
from .extensions import db
from .utils import cors_headers

DEFAULT_ALLOWED_ORIGINS = ['https://duel.tools', 'https://staging.duel.tools']


def create_app(test_config=None):
    app = Flask(__name__, instance_relative_config=True)

    # Configuration
    app.config.from_mapping(
        SQLALCHEMY_DATABASE_URI='sqlite:///' + os.path.join(app.instance_path, 'simulations.db'),
        SQLALCHEMY_TRACK_MODIFICATIONS=False,
        CORS_ALLOWED_ORIGINS=list(DEFAULT_ALLOWED_ORIGINS),
    )
    if test_config is None:
        app.config.from_pyfile('config.py', silent=True)
    else:
        app.config.from_mapping(test_config)

    # Stored payloads come back in the order they were posted
    app.json.sort_keys = False

    # Ensure instance folder exists
    try:
        os.makedirs(app.instance_path)
    except OSError:
        pass

    # Initialize Extensions
    db.init_app(app)

    # Register Blueprints
    from .blueprints import api
    app.register_blueprint(api.bp)

    @app.errorhandler(404)
    def not_found(error):
        return Response('Not Found', status=404, mimetype='text/plain')

    @app.errorhandler(405)
    def method_not_allowed(error):
        return Response('Method Not Allowed', status=405, mimetype='text/plain')

    @app.errorhandler(Exception)
    def internal_error(error):
        if isinstance(error, HTTPException):
            return error
        app.logger.exception('Error processing request: %s', error)
        return jsonify({"message": str(error) or "Internal Server Error"}), 500

    @app.after_request
    def add_cors_headers(response):
        headers = cors_headers(request.headers.get('Origin'), app.config['CORS_ALLOWED_ORIGINS'])
        for key, value in headers.items():
            response.headers[key] = value
        return response

    # Create DB Tables
    with app.app_context():
        db.create_all()

    return app
