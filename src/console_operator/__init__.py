"""
Console Operator OIDC setup - keeps the console's OIDC client status honest.

This operator verifies that an externally configured OIDC client has been
picked up by the console workload and reports the verdict through:
- Progressing/Degraded conditions on the console operator config
- The console's entry in the authentication resource's oidcClients status
"""

__version__ = "0.1.0"
