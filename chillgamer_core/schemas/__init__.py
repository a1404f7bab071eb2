"""
ChillGamer schema definitions

Reviews and watchlist entries are schema-less documents, so there are
no schemas for them here. This package contains the models of the
response bodies (``Insertion``, ``Confirmation``, ``Page``), the
dispatcher's result ``Envelope`` and the shared ``APIError`` model.

This package also contains the ``config`` module, but it's not
exported by default, since it's currently only used internally.
"""

from .envelopes import *
from .errors import *
