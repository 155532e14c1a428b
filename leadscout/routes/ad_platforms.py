"""
Ad platform routes.
"""
import logging

from flask import Blueprint, jsonify, request

from leadscout.adplatforms.base import PLATFORMS, InvalidProbeRequest
from leadscout.adplatforms.prober import get_prober

logger = logging.getLogger('routes.ad_platforms')

bp = Blueprint('ad_platforms', __name__)


@bp.route('/api/ad-platforms')
def list_platforms():
    return jsonify({'platforms': PLATFORMS})


@bp.route('/api/check-ad-platforms', methods=['POST'])
def check_ad_platforms():
    """Probe each requested platform for a lead; results keep request order."""
    data = request.get_json(silent=True) or {}
    try:
        results = get_prober().check_platforms(
            data.get('leadId'),
            data.get('platforms'),
            data.get('companyName') or '',
            data.get('location'),
        )
    except InvalidProbeRequest as e:
        return jsonify({'error': f'Invalid request data: {e}'}), 400
    return jsonify({'results': [r.to_dict() for r in results]})
