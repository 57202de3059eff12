"""
Main Routes

FLOW OVERVIEW
- /health [GET]
  • JSON health check.
- /metrics [GET]
  • Prometheus exposition.
"""

from datetime import datetime
from flask import Blueprint, Response, jsonify

from ..utils.prom_metrics import metrics_latest, CONTENT_TYPE_LATEST

main_bp = Blueprint('main', __name__)


@main_bp.route('/health')
def health():
    """Health check endpoint"""
    return jsonify({'status': 'healthy', 'timestamp': datetime.utcnow().isoformat()})


@main_bp.route('/metrics')
def metrics():
    """Prometheus metrics endpoint."""
    output = metrics_latest()
    return Response(output, mimetype=CONTENT_TYPE_LATEST)
