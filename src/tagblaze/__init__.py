"""TagBlaze — support tickets and tags behind agent/admin auth.

Tickets, tags and the ticket↔tag relation, served over HTTP with
JWT bearer authentication and two roles (agent, admin).
"""

__version__ = "0.1.0"
