"""Flask application for serving shared followings graphs.

The React/D3 front end fetches ``/api/graph?u=<users>`` and renders the
``{nodes, links}`` document it returns.
"""

from __future__ import annotations

import logging
from typing import Optional

from flask import Flask

from cumuli.network.cache import GraphCache
from cumuli.network.client import SoundCloudClient
from cumuli.service import SharedFollowingsService
from cumuli.settings import Settings, load_settings

logger = logging.getLogger(__name__)

SERVICE_KEY = "CUMULI_SERVICE"


def create_app(
    settings: Optional[Settings] = None,
    service: Optional[SharedFollowingsService] = None,
    *,
    testing: bool = False,
) -> Flask:
    """Flask application factory.

    A prebuilt service can be injected (tests); otherwise one is created
    from settings with a SoundCloud client and the filesystem cache.
    """
    app = Flask(__name__)
    app.config["TESTING"] = testing

    if not testing:
        logging.basicConfig(level=logging.INFO)

    if service is None:
        settings = settings or load_settings()
        cache = GraphCache.from_settings(settings) if settings.cache_enabled else None
        service = SharedFollowingsService(
            SoundCloudClient.from_settings(settings), settings, cache=cache
        )
    app.config[SERVICE_KEY] = service

    from cumuli.web.routes import graph_bp

    app.register_blueprint(graph_bp)
    return app
