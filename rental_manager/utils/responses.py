"""JSON response envelopes: {"success": bool, "message": str, "data"?: any}."""

from flask import jsonify


def success_response(data=None, message: str = "Success", status: int = 200, **extra):
    body = {"success": True, "data": data, "message": message}
    body.update(extra)
    return jsonify(body), status


def error_response(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def bad_request(message: str = "Bad Request: Missing required parameters"):
    return error_response(message, 400)


def unauthorized(message: str = "Unauthorized: You must be logged in to access this resource"):
    return error_response(message, 401)


def forbidden(message: str = "Forbidden: You do not have permission to access this resource"):
    return error_response(message, 403)


def server_error(message: str = "Internal server error"):
    return error_response(message, 500)
