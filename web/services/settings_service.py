"""Optimizer settings service."""
from typing import Dict

from flask import current_app

from cutorder.optimizer import OptimizationSettings
from web.extensions import db
from web.models import OptimizerSettings


def _to_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ('1', 'true', 'yes', 'on')
    return bool(value)


class SettingsService:
    """Service for managing optimizer settings."""

    @staticmethod
    def get_optimizer_settings() -> OptimizerSettings:
        """Get optimizer settings singleton, creating from config defaults if missing."""
        settings = OptimizerSettings.query.get(1)
        if not settings:
            settings = OptimizerSettings(
                id=1,
                origin_x=current_app.config.get('DEFAULT_ORIGIN_X', 0.0),
                origin_y=current_app.config.get('DEFAULT_ORIGIN_Y', 0.0),
                cut_holes_first=current_app.config.get('CUT_HOLES_FIRST', False),
                preserve_order=False
            )
            db.session.add(settings)
            db.session.commit()
        return settings

    @staticmethod
    def get_optimizer_settings_dict() -> Dict:
        """Get optimizer settings as dict for JSON."""
        settings = SettingsService.get_optimizer_settings()
        return {
            'origin_x': settings.origin_x,
            'origin_y': settings.origin_y,
            'cut_holes_first': settings.cut_holes_first,
            'preserve_order': settings.preserve_order
        }

    @staticmethod
    def update_optimizer_settings(data: Dict) -> OptimizerSettings:
        """
        Update optimizer settings.

        Raises:
            ValueError: If an origin coordinate is not a number
        """
        # Convert before touching the row so a bad value leaves it unchanged
        origin = {key: float(data[key]) for key in ('origin_x', 'origin_y') if key in data}

        settings = SettingsService.get_optimizer_settings()

        if 'origin_x' in origin:
            settings.origin_x = origin['origin_x']
        if 'origin_y' in origin:
            settings.origin_y = origin['origin_y']
        if 'cut_holes_first' in data:
            settings.cut_holes_first = _to_bool(data['cut_holes_first'])
        if 'preserve_order' in data:
            settings.preserve_order = _to_bool(data['preserve_order'])

        db.session.commit()
        return settings

    @staticmethod
    def to_optimization_settings(overrides: Dict = None) -> OptimizationSettings:
        """
        Build runtime optimizer options from the stored settings.

        Args:
            overrides: Optional per-request values taking precedence over
                the stored ones (same keys as the settings dict)
        """
        values = SettingsService.get_optimizer_settings_dict()
        for key in values:
            if overrides and key in overrides:
                values[key] = overrides[key]

        return OptimizationSettings(
            origin_x=float(values['origin_x'] or 0.0),
            origin_y=float(values['origin_y'] or 0.0),
            cut_holes_first=_to_bool(values['cut_holes_first']),
            preserve_order=_to_bool(values['preserve_order'])
        )
