"""Graph API blueprint."""

from __future__ import annotations

import logging

from flask import Blueprint, current_app, jsonify, request

from cumuli.exceptions import AggregationAborted, CumuliError, InvalidInput
from cumuli.models import parse_users
from cumuli.web import SERVICE_KEY

logger = logging.getLogger(__name__)

graph_bp = Blueprint("graph", __name__)


@graph_bp.route("/health")
def health():
    return jsonify({"status": "ok"})


@graph_bp.route("/api/graph")
def get_graph():
    """Return the shared followings graph for ``u`` (space-separated users).

    Returns: {"nodes": [{"name", "group"}], "links": [{"source", "target"}]}
    """
    service = current_app.config[SERVICE_KEY]
    users = parse_users(request.args.get("u", ""))

    try:
        return jsonify(service.get_graph_json(users))
    except InvalidInput as e:
        return jsonify({"success": False, "error": e.message, "details": e.details}), 400
    except AggregationAborted as e:
        logger.error("Graph request for %s aborted: %s", users, e.details)
        return (
            jsonify(
                {
                    "success": False,
                    "error": e.message,
                    "user": e.user,
                    "details": e.details,
                }
            ),
            502,
        )
    except CumuliError as e:
        logger.error("Graph request for %s failed: %s", users, e)
        return jsonify({"success": False, "error": e.message}), 500
