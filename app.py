# app.py
# A Flask server exposing the timed wealth tax life-cycle optimizer.

import logging

from flask import Flask, current_app, request, jsonify
from flask_cors import CORS
from pydantic import ValidationError

from wealth_tax import EconomicParameters, OptimizationSession, OptimizerSettings, SearchExhausted
from wealth_tax.errors import DomainError
from wealth_tax.tax_effects import tax_effect_sweep
from wealth_tax.trajectories import sample_trajectory

logger = logging.getLogger(__name__)


# --- 1. Initialize Flask App and Enable CORS ---
# CORS is necessary to allow the front end (on a different domain)
# to make requests to this server.
def create_app(session=None):
    app = Flask(__name__)
    CORS(app)

    # One session per app: it owns the result cache and the warm start,
    # so slider drags from the front end re-optimize incrementally.
    app.extensions['wealth_tax_session'] = session or OptimizationSession(OptimizerSettings.from_env())

    register_routes(app)
    return app


def _session():
    return current_app.extensions['wealth_tax_session']


def _error(message, status):
    return jsonify({'success': False, 'message': message}), status


def _parameters():
    # Range checks are the front end's job; here we only insist on a
    # complete set of numeric parameters.
    return EconomicParameters.model_validate(request.get_json(silent=True))


# --- 2. Define the API Endpoints ---
def register_routes(app):

    @app.errorhandler(ValidationError)
    def handle_bad_parameters(e):
        return _error('Invalid parameters: %s' % e, 400)

    @app.errorhandler(SearchExhausted)
    def handle_exhausted(e):
        logger.info("no feasible solution: %s", e)
        return _error('No feasible wealth path exists for these parameters.', 422)

    @app.errorhandler(DomainError)
    def handle_domain_error(e):
        return _error(str(e), 422)

    @app.errorhandler(500)
    def handle_internal_error(e):
        original = getattr(e, "original_exception", None) or e
        logger.error("optimization request failed: %r", original)
        return _error(str(original), 500)

    # This endpoint receives parameters, runs the optimization and returns the result.
    @app.route('/optimize', methods=['POST'])
    def optimize_model():
        result = _session().find_optimal_wealth(_parameters())
        payload = result.to_dict()
        payload.update(success=True, w1_opt=result.w1, w2_opt=result.w2)
        return jsonify(payload)

    # Optimal pair plus sampled wealth and consumption paths for charting.
    @app.route('/trajectory', methods=['POST'])
    def trajectory():
        params = _parameters()
        num_points = request.args.get('points', default=100, type=int)
        result = _session().find_optimal_wealth(params)
        return jsonify({
            'success': True,
            'result': result.to_dict(),
            'trajectory': sample_trajectory(params, result.w1, result.w2, num_points).to_dict(),
        })

    # How before-tax wealth, after-tax wealth and the bequest respond to the tax rate.
    @app.route('/tax-effects', methods=['POST'])
    def tax_effects():
        sweep = tax_effect_sweep(_session(), _parameters())
        payload = sweep.to_dict()
        payload['success'] = True
        return jsonify(payload)

    # Drop cached results and warm start history, e.g. when the user resets to defaults.
    @app.route('/reset', methods=['POST'])
    def reset():
        _session().reset()
        return jsonify({'success': True})

    # --- 3. Health Check Endpoint ---
    # A simple route to verify the server is running.
    @app.route('/')
    def index():
        return "Life-Cycle Model Optimization Server is running."

    @app.route('/stats')
    def stats():
        return jsonify(_session().stats())


app = create_app()

if __name__ == '__main__':
    # This allows running the app locally for testing
    logging.basicConfig(level=logging.INFO, format='%(asctime)s %(name)s %(levelname)s %(message)s')
    app.run(debug=True)
