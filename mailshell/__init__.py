"""Desktop client for the mail account backend.

The window exchanges named JSON messages with a backend process and renders
whichever screen the backend's replies call for.
"""
