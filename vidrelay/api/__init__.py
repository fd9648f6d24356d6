"""
API Layer

HTTP (Flask-RESTX) and real-time (Flask-SocketIO) bindings.
"""
