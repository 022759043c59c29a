from datetime import datetime, UTC
import uuid

from web.extensions import db


class OptimizerSettings(db.Model):
    """Cut order optimizer defaults (singleton - one row)."""

    id = db.Column(db.Integer, primary_key=True)
    origin_x = db.Column(db.Float)
    origin_y = db.Column(db.Float)
    cut_holes_first = db.Column(db.Boolean)  # All holes in all parts before any shell
    preserve_order = db.Column(db.Boolean)  # Keep the job's cut order, only compute rapids


class Job(db.Model):
    """Saved cut job: chains, cuts and parts in the JSON wire format."""

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = db.Column(db.String(200), nullable=False)
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(UTC))
    modified_at = db.Column(db.DateTime, default=lambda: datetime.now(UTC), onupdate=lambda: datetime.now(UTC))

    # Format: {"chains": [...], "cuts": [...], "parts": [...]}
    data = db.Column(db.JSON, nullable=False, default=dict)

    # Serialized result of the last optimization run, None until optimized
    last_result = db.Column(db.JSON, nullable=True)
