from flask import jsonify


def success(data=None, message=None, status=200, **extra):
    body = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    body.update(extra)
    return jsonify(body), status


def failure(error):
    return jsonify(error.to_dict()), error.status_code
