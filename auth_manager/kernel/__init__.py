"""
Kernel layer: identity core, user persistence and the error taxonomy.

The kernel knows nothing about HTTP; the API layer maps its errors to
responses.
"""
