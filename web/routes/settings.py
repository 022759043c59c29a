"""Settings routes - optimizer defaults."""
from flask import Blueprint, request

from web.services.settings_service import SettingsService
from web.utils.responses import success_response, error_response

settings_bp = Blueprint('settings', __name__)


@settings_bp.route('/optimizer', methods=['GET'])
def get_optimizer():
    """Get optimizer settings."""
    return success_response(data=SettingsService.get_optimizer_settings_dict())


@settings_bp.route('/optimizer', methods=['POST'])
def update_optimizer():
    """Update optimizer settings."""
    data = request.get_json(silent=True)
    if not data:
        return error_response('No data provided')

    try:
        SettingsService.update_optimizer_settings(data)
    except (TypeError, ValueError):
        return error_response('Origin coordinates must be numbers')

    return success_response(data=SettingsService.get_optimizer_settings_dict(), message='Settings saved')
