"""calldesk - call-campaign administration backend.

Hosts the admin API for call campaigns and the client identity
resolution engine that matches callers to campaign clients.
"""

__version__ = "0.1.0"
