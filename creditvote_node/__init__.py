"""
creditvote_node
---------------

Deadline-bound credit voting: participants are granted voting credits and
spend them for or against time-boxed proposals. The runtime lives in
``creditvote_node.runtime``; ``creditvote_node.creditvote_api`` wraps it in
a FastAPI app.
"""

__version__ = "0.1.0"
