"""
Adapters — thin wrappers around the Gmail, Calendar and Slack clients.

Each call returns raw API resources (or a Page of them) and raises
ArchiveError on failure. Parsing lives in extractors/.
"""
