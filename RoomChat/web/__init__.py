"""
Static web client and the HTTP responder that serves it.
"""
