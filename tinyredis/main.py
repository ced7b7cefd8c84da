"""Command-line entry point of the server."""

from __future__ import annotations

import os

from tinyredis import config, logger
from tinyredis.config import ServerProperties
from tinyredis.handler import RespHandler
from tinyredis.server import Config, listen_and_serve_with_signal

CONFIG_FILE = "redis.conf"


def main(argv=None) -> int:
    """Run the server until a stop signal; the command takes no options."""
    logger.setup(
        logger.Settings(path="logs", name="godis", ext="log", time_format="%Y-%m-%d")
    )

    if os.path.isfile(CONFIG_FILE):
        config.setup_config(CONFIG_FILE)
    else:
        config.properties = ServerProperties(bind="0.0.0.0", port=6379)

    props = config.properties
    try:
        listen_and_serve_with_signal(Config(f"{props.bind}:{props.port}"), RespHandler())
    except (OSError, ValueError) as exc:
        logger.error(exc)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())