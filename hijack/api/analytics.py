from flask import Blueprint, jsonify
from hijack import get_presence

analytics = Blueprint('analytics', __name__)


@analytics.route('/analytics', methods=['GET'])
def get_analytics():
    return jsonify(get_presence().snapshot())
