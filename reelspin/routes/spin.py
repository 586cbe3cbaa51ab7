from flask import Blueprint, request, jsonify, current_app

from reelspin.exceptions import ValidationException
from reelspin.schemas import MachineConfigSchema, SpinRequestSchema, SpinResultSchema
from reelspin.utils.game_config_manager import MachineConfigManager
from reelspin.utils.spin_handler import spin as play_spin
from reelspin.utils.spin_logger import SpinLogger

spin_bp = Blueprint('spin', __name__, url_prefix='/api')


@spin_bp.route('/machines', methods=['GET'])
def list_machines():
    return jsonify({'status': True, 'machines': MachineConfigManager.list_machines()}), 200


@spin_bp.route('/machines/<string:name>', methods=['GET'])
def get_machine(name):
    config, cache = MachineConfigManager.get_machine(name)
    return jsonify({
        'status': True,
        'machine': MachineConfigSchema().dump(config),
        'cache': cache
    }), 200


@spin_bp.route('/spin', methods=['POST'])
def spin():
    """
    Play one spin.

    The storage returned as ``result.exitStorage`` must be sent back with the
    player's next spin; nothing is kept server-side.
    """
    data = request.get_json(silent=True)
    if not data:
        raise ValidationException("Request body must be a JSON object.")

    spin_request = SpinRequestSchema().load(data) # ValidationError -> 422 handler
    config, cache = MachineConfigManager.get_machine(spin_request['machine'])

    result = play_spin(
        spin_request['max_lines'], spin_request['bet_per_line'],
        config, cache, spin_request['storage'], current_app.extensions['reelspin_rng']
    )
    SpinLogger.log_spin_event(
        spin_request['machine'], spin_request['max_lines'], spin_request['bet_per_line'],
        result, spin_request['storage']
    )
    return jsonify({'status': True, 'result': SpinResultSchema().dump(result)}), 200
