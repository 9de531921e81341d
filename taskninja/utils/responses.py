from flask import current_app, request
from werkzeug.exceptions import HTTPException

from taskninja.utils.json_codec import write_json

SERVER_ERROR_MESSAGE = "the server encountered a problem and could not process your request"


def log_error(err):
    current_app.logger.error(
        "%s", err, exc_info=err, extra={"request_method": request.method, "request_url": request.url}
    )


def error_response(status, message, headers=None):
    return write_json(status, {"error": message}, headers)


def server_error_response(err, headers=None):
    log_error(err)
    return error_response(500, SERVER_ERROR_MESSAGE, headers)


def not_found_response():
    return error_response(404, "the requested resource could not be found")


def method_not_allowed_response(allowed=None):
    headers = {"Allow": ", ".join(sorted(allowed))} if allowed else None
    message = f"the {request.method} method is not supported for this resource"
    return error_response(405, message, headers)


def bad_request_response(message):
    return error_response(400, message)


def failed_validation_response(errors):
    return error_response(422, errors)


def rate_limit_exceeded_response():
    return error_response(429, "rate limit exceeded")


def handle_http_exception(e: HTTPException):
    if e.code == 404:
        return not_found_response()
    if e.code == 405:
        return method_not_allowed_response(getattr(e, "valid_methods", None))
    if e.code == 429:
        return rate_limit_exceeded_response()
    if e.code is not None and e.code >= 500:
        return server_error_response(e, headers={"Connection": "close"})
    return error_response(e.code or 500, e.description)


def register_error_handlers(app):
    app.register_error_handler(HTTPException, handle_http_exception)
