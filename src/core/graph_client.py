"""
MS Graph client setup with lazy initialization (used as the mail relay).
"""

from azure.identity import ClientSecretCredential
from msgraph import GraphServiceClient

from core.config import FROM_EMAIL, GRAPH_APP_ID, GRAPH_CLIENT_SECRET, GRAPH_TENANT_ID

_graph_client: GraphServiceClient | None = None


def graph_configured() -> bool:
    """True when credentials and a sender mailbox are all set."""
    return all((GRAPH_TENANT_ID, GRAPH_APP_ID, GRAPH_CLIENT_SECRET, FROM_EMAIL))


def get_graph_client() -> GraphServiceClient:
    """Get or create the MS Graph client (lazy initialization)."""
    global _graph_client
    if not graph_configured():
        raise RuntimeError(
            "Mail is not configured: set MICROSOFT_GRAPH_TENANT_ID, "
            "MICROSOFT_GRAPH_APP_ID, MICROSOFT_GRAPH_CLIENT_SECRET and FROM_EMAIL"
        )
    if _graph_client is None:
        credential = ClientSecretCredential(
            tenant_id=GRAPH_TENANT_ID,
            client_id=GRAPH_APP_ID,
            client_secret=GRAPH_CLIENT_SECRET,
        )
        _graph_client = GraphServiceClient(credentials=credential)
    return _graph_client
