"""
hark: client SDK for a cloud speech-to-text service.

REST operations for models, sessions, asynchronous jobs and language-model
customization, plus streaming recognition over a WebSocket.
"""

__version__ = "0.1.0"
