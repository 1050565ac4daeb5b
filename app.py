#!/usr/bin/env python3
"""Portfolio content server: REST API over blog posts, projects, and git."""

import argparse
import logging
import os
import time

from flask import Flask, g, jsonify, request

from config import ConfigError, PortfolioConfig, load_config
from services.errors import ContentError
from services.repository import Repository, build_repository

log = logging.getLogger("app")


def configure_logging() -> None:
    level = logging.DEBUG if os.getenv("DEBUG_LOGGING") else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)-21s %(levelname)-8s %(name)-20s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def create_app(config: PortfolioConfig, repository: Repository | None = None) -> Flask:
    """Build a Flask app bound to one configuration."""
    app = Flask(__name__)
    app.config["PORTFOLIO_API_KEY"] = config.api_key
    app.extensions["portfolio"] = repository or build_repository(config)

    from routes.git import bp as git_bp
    from routes.posts import bp as posts_bp
    from routes.projects import bp as projects_bp

    app.register_blueprint(posts_bp)
    app.register_blueprint(projects_bp)
    app.register_blueprint(git_bp)

    @app.errorhandler(ContentError)
    def handle_content_error(error: ContentError):
        if error.status >= 500:
            log.error("%s %s failed: %s", request.method, request.path, error)
        return jsonify(error.to_dict()), error.status

    @app.before_request
    def start_timer():
        g.request_start_time = time.time()

    @app.after_request
    def log_request(response):
        elapsed = time.time() - g.get("request_start_time", time.time())
        logging.getLogger("app.request").info(
            "%s %s %s %.2fs", request.method, request.path, response.status_code, elapsed
        )
        return response

    @app.route("/health")
    def health():
        body = {"status": "ok", "backend": config.backend}
        if config.backend == "github":
            body["github"] = f"{config.github_owner}/{config.github_repo}"
        return jsonify(body)

    return app


def main():
    """Entry point for `portfolio-content` CLI command."""
    from auth import generate_api_key

    parser = argparse.ArgumentParser(description="Portfolio content server")
    parser.add_argument("--config", help="Path to a YAML/JSON config file")
    parser.add_argument("--host", help="Host to bind (overrides config)")
    parser.add_argument("--port", type=int, help="Port to listen on (overrides config)")
    parser.add_argument(
        "--generate-key", action="store_true", help="Print a new API key and exit"
    )
    cli_args = parser.parse_args()

    if cli_args.generate_key:
        print(generate_api_key())
        return

    configure_logging()
    try:
        config = load_config(cli_args.config)
    except ConfigError as e:
        parser.exit(2, f"config error: {e}\n")

    host = cli_args.host or config.host
    port = cli_args.port or config.port
    app = create_app(config)

    log.info("Portfolio content server v0.1.0")
    log.info("* Backend: %s", config.backend)
    if config.backend == "github":
        log.info("* Repository: %s/%s@%s", config.github_owner, config.github_repo, config.github_branch)
    else:
        log.info("* Portfolio: %s", config.portfolio_path)
    log.info("* Auth: %s", "enabled" if config.api_key else "disabled (set API_KEY)")
    log.info("* Listening on http://%s:%d", host, port)

    app.run(host=host, port=port, threaded=True)


if __name__ == "__main__":
    main()
