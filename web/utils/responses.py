"""JSON response helpers shared by the job, settings and API blueprints."""
from flask import jsonify

from cutorder.job_parser import ParseError


def success_response(data=None, message=None):
    """Return a successful API response."""
    response = {"status": "ok"}
    if data is not None:
        response["data"] = data
    if message is not None:
        response["message"] = message
    return jsonify(response), 200


def error_response(message, status_code=400):
    """Return an error API response."""
    return jsonify({"status": "error", "message": message}), status_code


def job_not_found_response():
    return error_response('Job not found', 404)


def optimization_error_response(error):
    """Map a job parse failure or a bad settings override to a 400 response."""
    if isinstance(error, ParseError):
        return error_response(str(error))
    return error_response(f'Invalid settings: {error}')


def validation_response(problems):
    """Return the job validation result; the job is valid when nothing was reported."""
    return jsonify({"valid": not problems, "errors": problems}), 200
