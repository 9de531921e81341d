from flask import Blueprint, current_app

from taskninja.utils.json_codec import write_json

health_bp = Blueprint("health", __name__)


@health_bp.get("/healthcheck")
def healthcheck():
    data = {
        "status": "available",
        "system_info": {
            "environment": current_app.config["ENV"],
            "version": current_app.config["VERSION"],
        },
    }
    return write_json(200, data)
