"""
Handlers package - Contains the Kopf handlers of the console operator.

- oidc_setup.py: watch events feeding the object cache and the daemon that
  runs the OIDC setup sync loop
"""
