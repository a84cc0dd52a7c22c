#!/usr/bin/env python3
"""
Scoreboard Server.
Usage: python3 main.py   (or the scoreboard-server console script)
"""

import logging

import uvicorn

from config import HOST, LOG_LEVEL, PORT
from web import app


def run():
    logging.basicConfig(
        level=LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    print("🚀 Starting Scoreboard Server...")
    print(f"   On this device:  http://127.0.0.1:{PORT}")
    print(f"   From the network: http://<device-ip>:{PORT}")

    try:
        uvicorn.run(app, host=HOST, port=PORT, log_level=LOG_LEVEL)
    except KeyboardInterrupt:
        print("\n👋 Exiting...")


if __name__ == "__main__":
    run()
