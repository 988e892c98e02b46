"""Expose API routers for FastAPI.

Room creation and lookup live here; everything that happens inside a
room goes over Socket.IO (see ``meetrelay.sockets``). Each module
defines a ``router`` object which is registered in ``meetrelay.main``
under the ``/api`` prefix.
"""

from . import rooms  # noqa: F401
