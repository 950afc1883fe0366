"""Sample Microsoft Graph user administration client.

Acquires app-only tokens with the client credentials flow and drives a
create/read/update/delete script against the directory ``users`` resource,
including Azure AD B2C custom (schema extension) attributes.
"""

__version__ = "0.1.0"
