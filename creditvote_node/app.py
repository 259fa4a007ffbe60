"""
creditvote_node/app.py
----------------------
Entrypoint for running the CreditVote API via:

    uvicorn creditvote_node.app:app

Route wiring lives in creditvote_node.creditvote_api.
"""

import os

from .config import get_bind_host, get_bind_port, load_config
from .creditvote_api import create_app

cfg = load_config(os.getcwd())
app = create_app(cfg)


if __name__ == "__main__":
    # python -m creditvote_node.app
    import uvicorn

    uvicorn.run(app, host=get_bind_host(cfg), port=get_bind_port(cfg))
