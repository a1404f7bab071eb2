"""
ChillGamer core REST API for game reviews and watchlists
"""

from .version import __version__, PROJECT_VERSION, PROJECT_VERSION_INFO
