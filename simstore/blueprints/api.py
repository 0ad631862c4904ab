from flask import Blueprint, current_app, request, jsonify, Response
from simstore.extensions import db
from simstore.models import Simulation
from simstore.utils import (
    generate_data_hash,
    parse_json_body,
    validate_simulation_data,
)

bp = Blueprint('api', __name__, url_prefix='/api')


def store_error_message(error):
    # DBAPI errors are wrapped by SQLAlchemy; report the driver's own text
    original = getattr(error, 'orig', None)
    return str(original if original is not None else error) or 'Unknown error'


@bp.route('/simulations', methods=['GET', 'POST'], provide_automatic_options=False)
def simulations():
    if request.method == 'POST':
        # Malformed JSON is left to the application-level error handler
        data = parse_json_body(request.get_data())
        return create_simulation(data)
    if request.method == 'GET':
        return get_simulation()
    return Response('Method Not Allowed', status=405, mimetype='text/plain')


def create_simulation(data):
    try:
        # 1. Check required fields and types
        validate_simulation_data(data)

        # 2. Hash the payload exactly as submitted
        data_hash = generate_data_hash(data['data'])

        # 3. Save to DB, created_at is filled in by the store
        sim = Simulation(
            id=data['id'],
            user_id=data['user_id'],
            env_id=data['env_id'],
            data_hash=data_hash,
            data=data['data'],
            result=data['result'],
            summary=data['summary'],
        )
        db.session.add(sim)
        db.session.commit()

        return jsonify({
            "message": "Simulation inserted successfully",
            "id": sim.id,
            "data_hash": data_hash,
        }), 201

    except Exception as e:
        db.session.rollback()
        current_app.logger.error('Error inserting simulation: %s', e)
        return jsonify({"message": store_error_message(e)}), 400


def get_simulation():
    if 'id' not in request.args:
        return jsonify({"message": "Query not valid"}), 404

    try:
        sim = Simulation.query.filter_by(id=request.args['id']).first()
        if not sim:
            return jsonify({"message": "Simulation not found"}), 404
        return jsonify(sim.to_dict()), 200

    except Exception as e:
        db.session.rollback()
        current_app.logger.error('Error retrieving simulation: %s', e)
        return jsonify({"message": "Error retrieving simulation"}), 500
