#!/usr/bin/env python3
"""
SceneKit Runner - starts the housekeeping loop and serves the HTTP API
"""

import os

from waitress import serve

from scenekit.app import create_app
from scenekit.config import load_config
from scenekit.utils.logger import log_shutdown, log_startup, setup_logger

if __name__ == "__main__":
    logger = setup_logger("runner")
    log_startup("runner")
    config = load_config()

    port = int(os.environ.get("PORT", config.get("port", 5080)))
    host = config.get("host", "0.0.0.0")
    debug_mode = config.get("debug", False)

    app = create_app(config=config)
    services = app.extensions["scenekit"]

    logger.info(f"🚀 Starting SceneKit on {host}:{port}")
    logger.info(f"🌍 Environment: {config.get('environment', 'unknown')}")
    logger.info(f"🔧 Debug mode: {debug_mode}")

    services.start_background()
    try:
        if debug_mode:
            app.run(host=host, port=port, debug=True, use_reloader=False)
        else:
            threads = int(os.environ.get("SCENEKIT_WAITRESS_THREADS", "4"))
            backlog = int(os.environ.get("SCENEKIT_WAITRESS_BACKLOG", "128"))
            logger.info(f"🍽️ Using Waitress WSGI server (threads={threads}, backlog={backlog})")
            serve(app, host=host, port=port, threads=threads, backlog=backlog)
    finally:
        services.shutdown()
        log_shutdown(logger, "SceneKit")
