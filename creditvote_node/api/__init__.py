# creditvote_node/api/__init__.py
