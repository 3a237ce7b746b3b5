"""
Route Globe Monitor web application.
Serves the globe figure and status texts while a background thread runs
the sync scheduler.
"""

import asyncio
import threading
from typing import Optional

from flask import Flask, Response, jsonify, render_template, request

from routeglobe.animator import BlinkAnimator
from routeglobe.api_clients import FirestoreClient
from routeglobe.config import Config, get_config
from routeglobe.display import StatusBoard
from routeglobe.focus import ViewFocusController
from routeglobe.models import Focus
from routeglobe.renderer import GlobeRenderer
from routeglobe.scheduler import SyncScheduler
from routeglobe.utils import log


def build_scheduler(
    config: Config,
    renderer: GlobeRenderer,
    board: StatusBoard,
    fetcher=None,
) -> SyncScheduler:
    """Wire the sync engine together from configuration."""
    animator = BlinkAnimator(
        renderer=renderer,
        blink_interval=config.blink_interval,
        settle_duration=config.settle_duration,
    )
    focus = ViewFocusController(
        default_focus=Focus(config.default_lat, config.default_lng),
        altitude=config.altitude,
        transition_ms=config.focus_transition_ms,
    )
    return SyncScheduler(
        fetcher=fetcher or FirestoreClient.from_config(config),
        animator=animator,
        focus=focus,
        renderer=renderer,
        board=board,
        batch_size=config.batch_size,
        refresh_interval=config.refresh_interval,
        count_label=config.count_label,
        error_text=config.error_text,
    )


def start_background_scheduler(scheduler: SyncScheduler) -> threading.Thread:
    """Run the scheduler on its own event loop in a daemon thread."""
    thread = threading.Thread(
        target=asyncio.run, args=(scheduler.run_forever(),), daemon=True
    )
    thread.start()
    log("SYSTEM", "Background scheduler started")
    return thread


def create_app(
    config: Optional[Config] = None,
    fetcher=None,
    start_scheduler: bool = True,
) -> Flask:
    """
    Create the Flask application.

    Args:
        config: Configuration (defaults to the global configuration)
        fetcher: Route event source (defaults to the Firestore client)
        start_scheduler: Start the background sync scheduler thread

    Returns:
        Configured Flask application
    """
    config = config or get_config()
    app = Flask(__name__)

    renderer = GlobeRenderer(
        height=config.globe_height,
        color=config.route_color,
        dimmed_color=config.dimmed_color,
        arc_altitude=config.arc_altitude,
    )
    renderer.point_of_view(
        config.default_lat, config.default_lng, config.altitude
    )
    board = StatusBoard()
    scheduler = build_scheduler(config, renderer, board, fetcher)

    app.extensions["routeglobe"] = {
        "renderer": renderer,
        "board": board,
        "scheduler": scheduler,
    }

    @app.route("/")
    def index():
        """Render the globe page."""
        return render_template(
            "index.html",
            fig_globe_json=renderer.to_json(),
            status=board.snapshot(),
            poll_interval_ms=int(config.blink_interval * 1000),
            rotate_period=config.rotate_period,
        )

    @app.route("/api/globe")
    def api_globe():
        """Get the current globe figure."""
        return Response(renderer.to_json(), mimetype="application/json")

    @app.route("/api/status")
    def api_status():
        """Get status texts and scheduler state."""
        status = board.snapshot()
        status["scheduler"] = scheduler.get_status()
        return jsonify(status)

    @app.route("/api/viewport", methods=["POST"])
    def api_viewport():
        """Resize the render surface; does not trigger a refresh."""
        payload = request.get_json(silent=True) or {}
        width = payload.get("width")
        valid = isinstance(width, int) and not isinstance(width, bool)
        if not valid or width <= 0:
            error = {"error": "width must be a positive integer"}
            return jsonify(error), 400
        renderer.set_width(width)
        return jsonify({"width": width})

    @app.route("/api/refresh", methods=["POST"])
    def api_refresh():
        """Force an immediate refresh cycle."""
        if not scheduler.request_refresh_threadsafe():
            return jsonify({"status": "error", "message": "not running"}), 503
        return jsonify({"status": "scheduled"}), 202

    if start_scheduler:
        start_background_scheduler(scheduler)

    return app


def main():
    """Run the development server."""
    config = get_config()
    app = create_app(config)

    host = config.dev_host
    port = config.dev_port
    log("SYSTEM", f"Server running: http://{host}:{port}")

    app.run(host=host, port=port, debug=True, use_reloader=False)


if __name__ == "__main__":
    main()
